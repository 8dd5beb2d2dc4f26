"""
Data models for dataset operations.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from wasteml.core.datasets import DatasetSplit, LabeledImageRecord

from .base import ToDictMixin


@dataclass
class ScanResult(ToDictMixin):
    """Result of scanning a dataset root."""

    root: str
    records: List[LabeledImageRecord] = field(default_factory=list)
    label_counts: Dict[str, int] = field(default_factory=dict)
    manifest_path: Optional[str] = None

    @property
    def total_images(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        # records are omitted; they can be large
        return {
            "root": self.root,
            "total_images": self.total_images,
            "num_classes": len(self.label_counts),
            "label_counts": dict(self.label_counts),
            "manifest_path": self.manifest_path,
        }


@dataclass
class SplitResult(ToDictMixin):
    """Result of splitting a scanned dataset."""

    root: str
    split: DatasetSplit
    train_counts: Dict[str, int] = field(default_factory=dict)
    test_counts: Dict[str, int] = field(default_factory=dict)
