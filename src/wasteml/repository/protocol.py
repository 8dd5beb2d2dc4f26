"""Abstract protocol for file repository operations."""

from pathlib import Path
from typing import Protocol, Union


class FileRepositoryProtocol(Protocol):
    """Protocol defining the filesystem queries services make.

    Services check their input paths through this interface so they can be
    tested with a mock repository.
    """

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if a file or directory exists."""
        ...

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        ...

    def is_dir(self, path: Union[str, Path]) -> bool:
        """Check if path is a directory."""
        ...

    def get_size(self, path: Union[str, Path]) -> int:
        """Get file size in bytes."""
        ...
