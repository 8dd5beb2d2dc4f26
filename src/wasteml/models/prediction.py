"""
Data models for batch prediction.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from wasteml.core.report import PredictionRecord

from .base import ToDictMixin


@dataclass
class BatchPredictionResult(ToDictMixin):
    """
    Predictions for a folder of images.

    Attributes:
        predictions: One record per image, in processing order.
        class_counts: Non-null predictions per label, in first-seen order.
        csv_lines: Report lines, header first, without line terminators.
        output_path: Where the report was written, once written.
    """

    predictions: List[PredictionRecord] = field(default_factory=list)
    class_counts: Dict[str, int] = field(default_factory=dict)
    csv_lines: List[str] = field(default_factory=list)
    output_path: str = ""

    @property
    def total(self) -> int:
        return len(self.predictions)
