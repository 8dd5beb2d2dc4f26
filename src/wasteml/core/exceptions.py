"""
Custom Exception Classes
========================

Error taxonomy for the classification pipeline. Core and adapter code raise
these; services turn them into failed ServiceResults and the CLI exits with
a non-zero status.

Every exception carries the offending path (when there is one) so the user
sees which input caused the abort.
"""

from pathlib import Path
from typing import Optional, Union


class WasteMLError(Exception):
    """
    Base class for all wasteml errors.

    Attributes:
        message (str): Explanation of the error
        path (Optional[str]): File or directory the error relates to
    """

    default_message = "Waste classification pipeline failed."

    def __init__(
        self,
        message: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.path = str(path) if path is not None else None
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.path and self.path not in self.message:
            return f"{self.message} ({self.path})"
        return self.message


class MissingInputPathError(WasteMLError, FileNotFoundError):
    """Raised when a dataset root, image folder or model file does not exist."""

    default_message = "Input path does not exist."


class UnsupportedImageError(WasteMLError):
    """
    Raised when a file passes the extension filter but cannot be decoded
    as an image.
    """

    default_message = "Image format is not supported."


class TrainingError(WasteMLError):
    """Raised when the training run fails inside the ML library."""

    default_message = "Model training failed."


class SerializationError(WasteMLError):
    """Raised when saving or loading a model artifact fails."""

    default_message = "Model serialization failed."


class InferenceError(WasteMLError):
    """Raised when running a model over an image fails."""

    default_message = "Model inference failed."
