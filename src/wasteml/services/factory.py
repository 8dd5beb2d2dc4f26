"""
Service Factory
===============

Factory for instantiating services with their file repository.

The factory defaults to LocalFileRepository; tests and other applications
can inject their own repository.

Usage:
    from wasteml.services.factory import ServiceFactory

    factory = ServiceFactory()
    dataset_svc = factory.dataset
    classifier_svc = factory.create_classifier_service()
"""

from typing import Optional

from wasteml.repository import LocalFileRepository
from wasteml.repository.protocol import FileRepositoryProtocol

from .batch_prediction import BatchPredictionService
from .classifier import ClassifierService
from .dataset import DatasetService


class ServiceFactory:
    """
    Factory for creating service instances with dependency injection.

    Attributes:
        file_repository: File repository implementation for file-based services
    """

    def __init__(self, file_repository: Optional[FileRepositoryProtocol] = None):
        self.file_repository = file_repository or LocalFileRepository()

    def create_dataset_service(self) -> DatasetService:
        return DatasetService(file_repository=self.file_repository)

    def create_classifier_service(self) -> ClassifierService:
        return ClassifierService(file_repository=self.file_repository)

    def create_batch_prediction_service(self) -> BatchPredictionService:
        return BatchPredictionService(file_repository=self.file_repository)

    # Each property access builds a fresh service; keep a reference when a
    # service holds state (ClassifierService keeps its model).

    @property
    def dataset(self) -> DatasetService:
        """Convenience property for create_dataset_service()."""
        return self.create_dataset_service()

    @property
    def classifier(self) -> ClassifierService:
        """Convenience property for create_classifier_service()."""
        return self.create_classifier_service()

    @property
    def batch_prediction(self) -> BatchPredictionService:
        """Convenience property for create_batch_prediction_service()."""
        return self.create_batch_prediction_service()
