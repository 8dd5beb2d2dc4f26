"""
Base class and utilities for all services.
"""

from dataclasses import asdict, dataclass, field, is_dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, List, Optional, TypeVar

if TYPE_CHECKING:
    from wasteml.repository.protocol import FileRepositoryProtocol

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Result object returned by service operations.

    Provides a consistent interface for views to handle operation outcomes.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: T = None,
        message: str = None,
        warnings: List[str] = None,
        **metadata,
    ) -> "ServiceResult[T]":
        """Create a successful result."""
        return cls(
            success=True,
            data=data,
            message=message,
            warnings=warnings or [],
            metadata=metadata,
        )

    @classmethod
    def fail(cls, error: str, warnings: List[str] = None, **metadata) -> "ServiceResult[T]":
        """Create a failed result."""
        return cls(
            success=False,
            error=error,
            warnings=warnings or [],
            metadata=metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        result = {
            "success": self.success,
            "message": self.message,
            "error": self.error,
            "warnings": self.warnings,
        }

        if self.data is not None:
            if hasattr(self.data, "to_dict"):
                result["data"] = self.data.to_dict()
            elif is_dataclass(self.data):
                result["data"] = asdict(self.data)
            elif isinstance(self.data, (dict, list, str, int, float, bool)):
                result["data"] = self.data
            else:
                result["data"] = str(self.data)
        else:
            result["data"] = None

        if self.metadata:
            result["metadata"] = self.metadata

        return result


@dataclass
class BatchProgress:
    """Progress information for batch operations."""

    total: int
    completed: int = 0
    current_file: Optional[str] = None

    @property
    def remaining(self) -> int:
        """Get remaining items."""
        return self.total - self.completed


ProgressCallback = Callable[[BatchProgress], None]


class BaseService:
    """
    Base class for all services.

    Provides common functionality for:
    - Input path validation through the file repository
    - Progress reporting for batch operations
    """

    def __init__(self, file_repository: Optional["FileRepositoryProtocol"] = None) -> None:
        """Initialize the service.

        Args:
            file_repository: File repository used to check input paths.
        """
        self.file_repository = file_repository
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """Set a callback for progress updates during batch operations."""
        self._progress_callback = callback

    def _report_progress(self, progress: BatchProgress) -> None:
        if self._progress_callback:
            self._progress_callback(progress)

    def _validate_input_path(self, path: str, must_exist: bool = True) -> Optional[str]:
        """
        Validate an input path.

        Returns:
            None if valid, error message if invalid
        """
        if must_exist and not self.file_repository.exists(path):
            return f"Path does not exist: {path}"
        return None

    def _validate_input_dir(self, path: str) -> Optional[str]:
        """Like _validate_input_path, but the path must also be a directory."""
        error = self._validate_input_path(path)
        if error:
            return error
        if not self.file_repository.is_dir(path):
            return f"Not a directory: {path}"
        return None
