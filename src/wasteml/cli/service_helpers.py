"""
CLI Service Helpers
===================

CLI-specific utilities for working with services and the ServiceFactory.

This module provides:
1. A lazily created singleton ServiceFactory shared by all commands
2. Consistent handling of failed ServiceResults

Usage:
    from wasteml.cli.service_helpers import services, handle_result

    scan = handle_result(services.dataset.scan("WasteDataset"))

    # Or manually check
    if not result.success:
        exit_with_error(result.error)
"""

from typing import TYPE_CHECKING, Optional, TypeVar

import click

# ServiceFactory is imported on first access so `wasteml --help` does not load torch
if TYPE_CHECKING:
    from wasteml.services import ServiceFactory
    from wasteml.services.base import ServiceResult
    from wasteml.services.batch_prediction import BatchPredictionService
    from wasteml.services.classifier import ClassifierService
    from wasteml.services.dataset import DatasetService

T = TypeVar("T")


_factory: Optional["ServiceFactory"] = None


def get_factory() -> "ServiceFactory":
    """
    Get the singleton ServiceFactory instance for CLI.

    Returns:
        ServiceFactory: The singleton factory instance with LocalFileRepository
    """
    global _factory
    if _factory is None:
        from wasteml.services import ServiceFactory

        _factory = ServiceFactory()
    return _factory


def set_factory(factory: "ServiceFactory") -> None:
    """
    Set a custom ServiceFactory instance, e.g. one with a mock repository in tests.
    """
    global _factory
    _factory = factory


def reset_factory() -> None:
    """Reset the singleton factory instance."""
    global _factory
    _factory = None


class _ServiceAccessor:
    """Lazy, typed access to services through the singleton factory."""

    @property
    def dataset(self) -> "DatasetService":
        return get_factory().dataset

    @property
    def classifier(self) -> "ClassifierService":
        return get_factory().classifier

    @property
    def batch_prediction(self) -> "BatchPredictionService":
        return get_factory().batch_prediction


services = _ServiceAccessor()


def handle_result(result: "ServiceResult[T]") -> T:
    """
    Return the data of a successful result, or exit with its error.

    Warnings attached to the result are echoed to stderr either way.

    Raises:
        SystemExit: If result indicates failure (exits with code 1)
    """
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    if not result.success:
        exit_with_error(result.error or "Unknown error")
    return result.data


def exit_with_error(message: str, code: int = 1) -> None:
    """
    Print error message and exit.

    Raises:
        SystemExit: Always exits with specified code
    """
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(code)


__all__ = [
    "services",
    "get_factory",
    "set_factory",
    "reset_factory",
    "handle_result",
    "exit_with_error",
]
