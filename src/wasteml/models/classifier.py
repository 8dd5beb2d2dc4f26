"""
Data models for image classifier operations.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import ToDictMixin


@dataclass
class TrainResult(ToDictMixin):
    """Result of model training."""

    architecture: str
    epochs: int
    num_classes: int
    classes: List[str] = field(default_factory=list)
    train_size: int = 0
    validation_size: int = 0
    final_train_accuracy: Optional[float] = None
    final_validation_accuracy: Optional[float] = None


@dataclass
class ModelInfo(ToDictMixin):
    """Schema and file details of a saved model artifact."""

    path: str
    size_bytes: int
    schema: Dict[str, Any] = field(default_factory=dict)

    def _to_dict_extra(self) -> Optional[Dict[str, Any]]:
        return {"classes": self.schema.get("classes", [])}
