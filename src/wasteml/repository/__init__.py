"""File repository layer for dependency injection."""

from wasteml.repository.local import LocalFileRepository
from wasteml.repository.protocol import FileRepositoryProtocol

__all__ = [
    "FileRepositoryProtocol",
    "LocalFileRepository",
]
