"""Base helpers for result data models."""

from dataclasses import asdict, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional


class ToDictMixin:
    """
    Mixin that adds to_dict() to dataclasses.

    Nested dataclasses, lists, dicts and Paths are converted recursively.
    Override _to_dict_extra() to add derived fields.

    Example:
        @dataclass
        class ScanResult(ToDictMixin):
            root: str
            total_images: int

        ScanResult(root="WasteDataset", total_images=5).to_dict()
    """

    def to_dict(self) -> Dict[str, Any]:
        if not is_dataclass(self):
            raise TypeError(f"{self.__class__.__name__} is not a dataclass")

        result = {f.name: self._serialize_value(getattr(self, f.name)) for f in fields(self)}

        extra = self._to_dict_extra()
        if extra:
            result.update(extra)

        return result

    def _serialize_value(self, value: Any) -> Any:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        if isinstance(value, dict):
            return {k: self._serialize_value(v) for k, v in value.items()}
        if hasattr(value, "to_dict"):
            return value.to_dict()
        if is_dataclass(value):
            return asdict(value)
        return str(value)

    def _to_dict_extra(self) -> Optional[Dict[str, Any]]:
        """Override to add extra fields to dict output."""
        return None
