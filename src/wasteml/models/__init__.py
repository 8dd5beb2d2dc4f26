"""Data models for wasteml."""

from wasteml.models.base import ToDictMixin
from wasteml.models.classifier import ModelInfo, TrainResult
from wasteml.models.dataset import ScanResult, SplitResult
from wasteml.models.prediction import BatchPredictionResult

__all__ = [
    "BatchPredictionResult",
    "ModelInfo",
    "ScanResult",
    "SplitResult",
    "ToDictMixin",
    "TrainResult",
]
