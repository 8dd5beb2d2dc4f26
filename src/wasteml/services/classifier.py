"""Service for training, evaluating and persisting image classifiers.

Wraps ImageClassifierAdapter from the adapters layer. The service holds the
current model in memory between calls, so a CLI command can create, train,
evaluate and save with the same service instance.
"""

from typing import Any, Dict, List, Optional, Sequence

from wasteml.core.datasets import LabeledImageRecord
from wasteml.core.evaluate import EvaluationMetrics
from wasteml.core.exceptions import WasteMLError
from wasteml.core.logger import get_logger
from wasteml.models.classifier import ModelInfo, TrainResult
from wasteml.repository.protocol import FileRepositoryProtocol

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


class ClassifierService(BaseService):
    """Service for image classifier operations.

    Example:
        >>> from wasteml.services import ServiceFactory
        >>> svc = ServiceFactory().classifier
        >>> svc.create_model(architecture="resnet101")
        >>> result = svc.train(split.train, split.test)
        >>> metrics = svc.evaluate(split.test).data
        >>> svc.save_model("WasteClassificationModel.zip")
    """

    def __init__(self, file_repository: FileRepositoryProtocol) -> None:
        super().__init__(file_repository=file_repository)
        self._adapter = None

    @property
    def adapter(self) -> Any:
        """The in-memory ImageClassifierAdapter, or None."""
        return self._adapter

    def _require_adapter(self) -> Optional[str]:
        if self._adapter is None:
            return "No model loaded. Use create_model() or load_model() first."
        return None

    def list_architectures(self) -> ServiceResult[List[str]]:
        from wasteml.adapters.torchvision import ARCHITECTURES, DEFAULT_ARCHITECTURE

        return ServiceResult.ok(data=list(ARCHITECTURES), default=DEFAULT_ARCHITECTURE)

    def create_model(
        self,
        architecture: str = "resnet101",
        pretrained: bool = True,
        image_size: int = 224,
        device: Optional[str] = None,
    ) -> ServiceResult[Dict[str, Any]]:
        """Create a new untrained model.

        Args:
            architecture: Backbone architecture (resnet18 ... resnet152).
            pretrained: Start from ImageNet weights.
            image_size: Side length images are resized to.
            device: Torch device, or None to auto-detect.

        Returns:
            ServiceResult containing the model schema.
        """
        from wasteml.adapters.torchvision import ImageClassifierAdapter

        try:
            self._adapter = ImageClassifierAdapter.create(
                architecture=architecture,
                pretrained=pretrained,
                image_size=image_size,
                device=device,
            )
        except WasteMLError as e:
            return ServiceResult.fail(str(e))
        except ValueError as e:
            return ServiceResult.fail(f"Failed to create model: {e}")

        return ServiceResult.ok(
            data=self._adapter.schema,
            message=f"Created {architecture} model",
        )

    def train(
        self,
        train: Sequence[LabeledImageRecord],
        validation: Optional[Sequence[LabeledImageRecord]] = None,
        options: Any = None,
        metrics_callback: Any = None,
    ) -> ServiceResult[TrainResult]:
        """Train the current model.

        Args:
            train: Training records.
            validation: Records scored after every epoch.
            options: TrainingOptions (defaults apply when None).
            metrics_callback: Receives EpochMetrics after every epoch.

        Returns:
            ServiceResult containing TrainResult.
        """
        error = self._require_adapter()
        if error:
            return ServiceResult.fail(error)

        from wasteml.adapters.torchvision import TrainingOptions

        options = options or TrainingOptions()
        try:
            history = self._adapter.fit(
                train, validation, options=options, metrics_callback=metrics_callback
            )
        except WasteMLError as e:
            return ServiceResult.fail(str(e))

        train_history = [m for m in history if m.dataset == "Train"]
        val_history = [m for m in history if m.dataset == "Validation"]
        result = TrainResult(
            architecture=self._adapter.architecture,
            epochs=options.epochs,
            num_classes=self._adapter.num_classes,
            classes=self._adapter.classes,
            train_size=len(train),
            validation_size=len(validation or []),
            final_train_accuracy=train_history[-1].accuracy if train_history else None,
            final_validation_accuracy=val_history[-1].accuracy if val_history else None,
        )
        return ServiceResult.ok(data=result, message=f"Trained for {options.epochs} epochs")

    def evaluate(self, records: Sequence[LabeledImageRecord]) -> ServiceResult[EvaluationMetrics]:
        """Score records with the current model and compute metrics."""
        error = self._require_adapter()
        if error:
            return ServiceResult.fail(error)

        try:
            metrics = self._adapter.evaluate(records)
        except WasteMLError as e:
            return ServiceResult.fail(str(e))
        except ValueError as e:
            return ServiceResult.fail(f"Evaluation failed: {e}")

        return ServiceResult.ok(data=metrics, message=f"Evaluated {metrics.total_samples} images")

    def save_model(
        self, path: str, dataset_schema: Optional[Dict[str, Any]] = None
    ) -> ServiceResult[str]:
        """Save the current model to a zip artifact, overwriting any existing file."""
        error = self._require_adapter()
        if error:
            return ServiceResult.fail(error)

        try:
            saved = self._adapter.save(path, dataset_schema=dataset_schema)
        except WasteMLError as e:
            return ServiceResult.fail(str(e))

        return ServiceResult.ok(data=saved, message=f"Model saved to {saved}")

    def load_model(self, path: str, device: Optional[str] = None) -> ServiceResult[Dict[str, Any]]:
        """Load a saved model and make it the current model."""
        error = self._validate_input_path(path)
        if error:
            return ServiceResult.fail(error)

        from wasteml.adapters.torchvision import ImageClassifierAdapter

        try:
            self._adapter = ImageClassifierAdapter.load(path, device=device)
        except WasteMLError as e:
            return ServiceResult.fail(str(e))

        return ServiceResult.ok(data=self._adapter.schema, message=f"Loaded model from {path}")

    def get_model_info(self, path: str) -> ServiceResult[ModelInfo]:
        """Read the schema of a saved model without loading its weights."""
        error = self._validate_input_path(path)
        if error:
            return ServiceResult.fail(error)

        from wasteml.adapters.torchvision import ImageClassifierAdapter

        try:
            schema = ImageClassifierAdapter.read_schema(path)
        except WasteMLError as e:
            return ServiceResult.fail(str(e))

        return ServiceResult.ok(
            data=ModelInfo(path=path, size_bytes=self.file_repository.get_size(path), schema=schema)
        )
