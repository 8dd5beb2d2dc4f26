"""
Files Module
============

File wrappers and path helpers used by the rest of the package:
- File dataclasses (TextFile, BinaryFile) usable as context managers
- Directory creation for output paths
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# Base File Class
# =============================================================================


@dataclass
class File(ABC):
    """
    Abstract base class for file operations.

    Attributes:
        path: Path to the file
        mode: File mode ('r', 'w', 'rb', 'wb', etc.)
        encoding: Character encoding (for text files)
    """

    path: Union[str, Path]
    mode: str = "r"
    encoding: Optional[str] = None
    _handle: Optional[IO] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.path, str):
            self.path = Path(self.path)

    @property
    def is_open(self) -> bool:
        """Check if the file handle is open."""
        return self._handle is not None and not self._handle.closed

    @property
    def handle(self) -> Optional[IO]:
        """Get the underlying file handle (e.g. for the csv module or torch.save)."""
        return self._handle

    @abstractmethod
    def open(self) -> "File":
        """Open the file."""

    def close(self) -> None:
        """Close the file."""
        if self._handle is not None and not self._handle.closed:
            self._handle.close()
            logger.debug(f"Closed file: {self.path}")
        self._handle = None

    @abstractmethod
    def write(self, content: Any) -> int:
        """Write content to the file."""

    def read(self, size: int = -1) -> Any:
        """
        Read content from the file.

        Raises:
            OSError: If file is not open for reading
        """
        if not self.is_open:
            raise OSError(f"File is not open: {self.path}")
        if "r" not in self.mode and "+" not in self.mode:
            raise OSError(f"File is not open for reading: {self.path}")

        return self._handle.read(size)

    def _check_writable(self) -> None:
        if not self.is_open:
            raise OSError(f"File is not open: {self.path}")
        if self.mode in ("r", "rb"):
            raise OSError(f"File is not open for writing: {self.path}")

    def __enter__(self) -> "File":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


# =============================================================================
# Text File Class
# =============================================================================


@dataclass
class TextFile(File):
    """
    Dataclass for text file operations.

    Attributes:
        path: Path to the file
        mode: File mode ('r', 'w', 'a', 'r+', 'w+', 'a+')
        encoding: Character encoding (default: 'utf-8')
        newline: Newline handling. Use '' for CSV files so the csv module
                 controls line endings.

    Example:
        >>> with TextFile("Predictions.csv", mode="w", newline="") as f:
        ...     writer = csv.writer(f.handle, lineterminator="\\n")
        ...     writer.writerow(["ImageName", "PredictedLabel"])
    """

    mode: str = "r"
    encoding: Optional[str] = "utf-8"
    newline: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        valid_modes = {"r", "w", "a", "r+", "w+", "a+", "x", "x+"}
        if self.mode not in valid_modes:
            raise ValueError(f"Invalid text mode '{self.mode}'. Must be one of {valid_modes}")

    def open(self) -> "TextFile":
        """
        Open the text file.

        Raises:
            FileNotFoundError: If file doesn't exist and mode is 'r'
            OSError: If file cannot be opened
        """
        if self.is_open:
            logger.warning(f"File already open: {self.path}")
            return self

        try:
            self._handle = open(
                self.path, mode=self.mode, encoding=self.encoding, newline=self.newline
            )
            logger.debug(f"Opened text file: {self.path}")
        except FileNotFoundError as err:
            raise FileNotFoundError(f"Text file not found: {self.path}") from err
        except OSError as e:
            raise OSError(f"Cannot open text file {self.path}: {e}") from e

        return self

    def write(self, content: str) -> int:
        """
        Write content to the text file.

        Raises:
            OSError: If file is not open for writing
            TypeError: If content is not a string
        """
        self._check_writable()
        if not isinstance(content, str):
            raise TypeError(f"Content must be str, not {type(content).__name__}")

        return self._handle.write(content)


# =============================================================================
# Binary File Class
# =============================================================================


@dataclass
class BinaryFile(File):
    """
    Dataclass for binary file operations.

    Attributes:
        path: Path to the file
        mode: File mode ('rb', 'wb', 'ab', 'r+b', 'w+b', 'a+b')
    """

    mode: str = "rb"
    encoding: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        valid_modes = {"rb", "wb", "ab", "r+b", "w+b", "a+b", "xb", "x+b"}
        if self.mode not in valid_modes:
            raise ValueError(f"Invalid binary mode '{self.mode}'. Must be one of {valid_modes}")

    def open(self) -> "BinaryFile":
        """
        Open the binary file.

        Raises:
            FileNotFoundError: If file doesn't exist and mode is 'rb'
            OSError: If file cannot be opened
        """
        if self.is_open:
            logger.warning(f"File already open: {self.path}")
            return self

        try:
            self._handle = open(self.path, mode=self.mode)
            logger.debug(f"Opened binary file: {self.path}")
        except FileNotFoundError as err:
            raise FileNotFoundError(f"Binary file not found: {self.path}") from err
        except OSError as e:
            raise OSError(f"Cannot open binary file {self.path}: {e}") from e

        return self

    def write(self, content: bytes) -> int:
        """
        Write content to the binary file.

        Raises:
            OSError: If file is not open for writing
            TypeError: If content is not bytes
        """
        self._check_writable()
        if not isinstance(content, (bytes, bytearray)):
            raise TypeError(f"Content must be bytes or bytearray, not {type(content).__name__}")

        return self._handle.write(content)


# =============================================================================
# Path Utilities
# =============================================================================


def ensure_parent_directory(path: Union[str, Path]) -> Path:
    """
    Create the parent directory of an output file if needed.

    Args:
        path: Output file path

    Returns:
        The file path as a Path object
    """
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created directory: {path.parent}")
    return path
