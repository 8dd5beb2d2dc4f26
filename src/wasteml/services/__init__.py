"""
Services Package
================

Application services that orchestrate between views (CLI) and core logic.

Services provide:
- A clean interface for views to invoke operations
- Input validation and error handling
- Progress reporting and logging

Architecture:
    View (CLI)
        | (config values, paths)
    Service
        | (delegates to)
    Core (scanning, splitting, metrics, reports) and adapters (torchvision)

Usage:
    from wasteml.services import ServiceFactory

    factory = ServiceFactory()
    split = factory.dataset.split("WasteDataset").data.split
    classifier = factory.classifier
    classifier.create_model()
    classifier.train(split.train, split.test)
"""

from .base import BaseService, BatchProgress, ServiceResult
from .batch_prediction import BatchPredictionService
from .classifier import ClassifierService
from .dataset import DatasetService
from .factory import ServiceFactory

__all__ = [
    "BaseService",
    "BatchPredictionService",
    "BatchProgress",
    "ClassifierService",
    "DatasetService",
    "ServiceFactory",
    "ServiceResult",
]
