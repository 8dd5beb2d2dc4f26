import io
import json
import pickle
import zipfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import torch
import torch.nn.functional as F
from torch import nn
from torchvision import models as tv_models

from wasteml import __version__
from wasteml.adapters.torchvision.data import build_transform, iter_batches, load_image_tensor
from wasteml.core.datasets import LabeledImageRecord, labels_of
from wasteml.core.device import resolve_device
from wasteml.core.evaluate import EvaluationMetrics, compute_metrics
from wasteml.core.exceptions import (
    InferenceError,
    MissingInputPathError,
    SerializationError,
    TrainingError,
    WasteMLError,
)
from wasteml.core.files import ensure_parent_directory
from wasteml.core.logger import get_logger

logger = get_logger(__name__)

ARCHITECTURES = ("resnet18", "resnet34", "resnet50", "resnet101", "resnet152")
DEFAULT_ARCHITECTURE = "resnet101"

WEIGHTS_ENTRY = "model.pt"
SCHEMA_ENTRY = "schema.json"
ARTIFACT_FORMAT_VERSION = 1


@dataclass
class TrainingOptions:
    """Hyperparameters for bottleneck training of the classification head."""

    epochs: int = 10
    batch_size: int = 10
    learning_rate: float = 0.01
    reuse_train_bottleneck: bool = True
    reuse_validation_bottleneck: bool = True
    seed: int = 1

    def __post_init__(self) -> None:
        if self.epochs < 1:
            raise ValueError(f"epochs must be at least 1, got {self.epochs}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EpochMetrics:
    """Accuracy and cross-entropy of one dataset after one epoch."""

    epoch: int
    dataset: str
    accuracy: float
    cross_entropy: float
    learning_rate: float

    def __str__(self) -> str:
        return (
            f"Phase: Training, Dataset used: {self.dataset}, Epoch: {self.epoch}, "
            f"Accuracy: {self.accuracy:.4f}, Cross-Entropy: {self.cross_entropy:.4f}"
        )


MetricsCallback = Callable[[EpochMetrics], None]


class ImageClassifierAdapter:
    """Transfer-learning image classifier built on a frozen torchvision ResNet.

    The backbone turns every image into a bottleneck feature vector; only a
    linear head on top of those features is trained. Class labels are mapped
    to integer keys in sorted order and mapped back on output.

    Example:
        >>> adapter = ImageClassifierAdapter.create(architecture="resnet18")
        >>> adapter.fit(train_records, test_records, TrainingOptions(epochs=2))
        >>> metrics = adapter.evaluate(test_records)
        >>> adapter.save("WasteClassificationModel.zip")

        >>> adapter = ImageClassifierAdapter.load("WasteClassificationModel.zip")
        >>> label, score = adapter.predict("TestImages/a.jpg")
    """

    def __init__(
        self,
        backbone: nn.Module,
        feature_dim: int,
        architecture: str,
        image_size: int = 224,
        head: Optional[nn.Linear] = None,
        classes: Optional[Sequence[str]] = None,
        dataset_schema: Optional[Dict[str, Any]] = None,
        device: Optional[Union[str, torch.device]] = None,
    ) -> None:
        self._device = resolve_device(device)
        self._backbone = backbone.to(self._device).eval()
        for parameter in self._backbone.parameters():
            parameter.requires_grad = False
        self._feature_dim = feature_dim
        self._architecture = architecture
        self._image_size = image_size
        self._head = head.to(self._device).eval() if head is not None else None
        self._classes = list(classes or [])
        self._dataset_schema = dataset_schema
        self._transform = build_transform(image_size)
        self._feature_cache: Dict[str, torch.Tensor] = {}

    @staticmethod
    def _build_backbone(architecture: str, pretrained: bool) -> Tuple[nn.Module, int]:
        """Instantiate a ResNet with its final layer replaced by Identity."""
        if architecture not in ARCHITECTURES:
            raise ValueError(
                f"Unsupported architecture '{architecture}'. Choose from: {', '.join(ARCHITECTURES)}"
            )
        network = tv_models.get_model(architecture, weights="DEFAULT" if pretrained else None)
        feature_dim = network.fc.in_features
        network.fc = nn.Identity()
        return network, feature_dim

    @classmethod
    def create(
        cls,
        architecture: str = DEFAULT_ARCHITECTURE,
        pretrained: bool = True,
        image_size: int = 224,
        device: Optional[Union[str, torch.device]] = None,
    ) -> "ImageClassifierAdapter":
        """Create an untrained classifier.

        Args:
            architecture: One of ARCHITECTURES.
            pretrained: Start from ImageNet weights (downloaded by torchvision).
            image_size: Side length images are resized to.
            device: Torch device name, or None to auto-detect.

        Raises:
            ValueError: If the architecture is not supported.
            TrainingError: If the backbone weights cannot be obtained.
        """
        try:
            backbone, feature_dim = cls._build_backbone(architecture, pretrained)
        except (OSError, RuntimeError) as e:
            raise TrainingError(f"Cannot build {architecture} backbone: {e}") from e
        logger.info(f"Created {architecture} backbone (pretrained={pretrained})")
        return cls(backbone, feature_dim, architecture, image_size=image_size, device=device)

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    def _compute_features(self, paths: Sequence[str], batch_size: int) -> torch.Tensor:
        chunks = []
        with torch.no_grad():
            for batch in iter_batches(paths, batch_size):
                images = torch.stack([load_image_tensor(p, self._transform) for p in batch])
                chunks.append(self._backbone(images.to(self._device)).cpu())
        if not chunks:
            return torch.empty((0, self._feature_dim))
        return torch.cat(chunks)

    def _features(self, paths: Sequence[str], batch_size: int, reuse: bool) -> torch.Tensor:
        """Bottleneck features for paths, served from the cache when reuse is on."""
        if not reuse:
            return self._compute_features(paths, batch_size)

        missing = [p for p in dict.fromkeys(paths) if p not in self._feature_cache]
        if missing:
            for path, feature in zip(missing, self._compute_features(missing, batch_size)):
                self._feature_cache[path] = feature
        return torch.stack([self._feature_cache[p] for p in paths])

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def _epoch_metrics(
        self,
        head: nn.Linear,
        features: torch.Tensor,
        keys: torch.Tensor,
        epoch: int,
        dataset: str,
        learning_rate: float,
    ) -> EpochMetrics:
        head.eval()
        with torch.no_grad():
            logits = head(features.to(self._device)).cpu()
        return EpochMetrics(
            epoch=epoch,
            dataset=dataset,
            accuracy=float((logits.argmax(dim=1) == keys).float().mean().item()),
            cross_entropy=float(F.cross_entropy(logits, keys).item()),
            learning_rate=learning_rate,
        )

    def fit(
        self,
        train: Sequence[LabeledImageRecord],
        validation: Optional[Sequence[LabeledImageRecord]] = None,
        options: Optional[TrainingOptions] = None,
        metrics_callback: Optional[MetricsCallback] = None,
    ) -> List[EpochMetrics]:
        """Train the classification head.

        Every epoch runs; metrics for the train set (and the validation set,
        when given) are reported through metrics_callback after each epoch.

        Args:
            train: Records to train on.
            validation: Optional records scored after every epoch.
            options: Hyperparameters (defaults to TrainingOptions()).
            metrics_callback: Receives one EpochMetrics per dataset per epoch.

        Returns:
            All EpochMetrics in the order they were reported.

        Raises:
            TrainingError: If the training set is empty or torch fails.
            UnsupportedImageError: If an image cannot be decoded.
        """
        options = options or TrainingOptions()
        train = list(train)
        validation = list(validation or [])
        if not train:
            raise TrainingError("Training set is empty")

        classes = labels_of(train + validation)
        key_of = {label: key for key, label in enumerate(classes)}
        train_paths = [r.image_path for r in train]
        train_keys = torch.tensor([key_of[r.label] for r in train], dtype=torch.long)
        val_paths = [r.image_path for r in validation]
        val_keys = torch.tensor([key_of[r.label] for r in validation], dtype=torch.long)

        history: List[EpochMetrics] = []

        def report(metrics: EpochMetrics) -> None:
            history.append(metrics)
            logger.debug(str(metrics))
            if metrics_callback:
                metrics_callback(metrics)

        try:
            torch.manual_seed(options.seed)
            generator = torch.Generator().manual_seed(options.seed)
            head = nn.Linear(self._feature_dim, len(classes)).to(self._device)
            optimizer = torch.optim.SGD(head.parameters(), lr=options.learning_rate)
            criterion = nn.CrossEntropyLoss()

            for epoch in range(1, options.epochs + 1):
                train_features = self._features(
                    train_paths, options.batch_size, options.reuse_train_bottleneck
                )
                head.train()
                order = torch.randperm(len(train_paths), generator=generator)
                for start in range(0, len(order), options.batch_size):
                    idx = order[start : start + options.batch_size]
                    optimizer.zero_grad()
                    loss = criterion(
                        head(train_features[idx].to(self._device)),
                        train_keys[idx].to(self._device),
                    )
                    loss.backward()
                    optimizer.step()

                report(
                    self._epoch_metrics(
                        head, train_features, train_keys, epoch, "Train", options.learning_rate
                    )
                )
                if validation:
                    val_features = self._features(
                        val_paths, options.batch_size, options.reuse_validation_bottleneck
                    )
                    report(
                        self._epoch_metrics(
                            head, val_features, val_keys, epoch, "Validation", options.learning_rate
                        )
                    )
        except WasteMLError:
            raise
        except (RuntimeError, ValueError) as e:
            raise TrainingError(f"Training failed: {e}") from e

        self._head = head.eval()
        self._classes = classes
        logger.info(f"Trained {self._architecture} head on {len(train)} images, {len(classes)} classes")
        return history

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def _require_trained(self) -> nn.Linear:
        if self._head is None or not self._classes:
            raise InferenceError("Model has not been trained or loaded")
        return self._head

    def predict_proba(self, image_paths: Sequence[str], batch_size: int = 10) -> np.ndarray:
        """Class probabilities, one row per image, columns ordered as classes."""
        head = self._require_trained()
        if not image_paths:
            return np.empty((0, len(self._classes)))
        try:
            features = self._compute_features(list(image_paths), batch_size)
            with torch.no_grad():
                logits = head(features.to(self._device))
            return torch.softmax(logits, dim=1).cpu().numpy()
        except WasteMLError:
            raise
        except RuntimeError as e:
            raise InferenceError(f"Inference failed: {e}") from e

    def transform(self, records: Sequence[LabeledImageRecord]) -> np.ndarray:
        """Score records; probabilities are ordered as self.classes."""
        return self.predict_proba([r.image_path for r in records])

    def evaluate(self, records: Sequence[LabeledImageRecord]) -> EvaluationMetrics:
        """Score records and compute multiclass metrics against their labels."""
        records = list(records)
        probabilities = self.transform(records)
        return compute_metrics([r.label for r in records], probabilities, self._classes)

    def predict(self, image_path: Union[str, Path]) -> Tuple[str, float]:
        """Predict the label of one image.

        Returns:
            (label, probability of that label)
        """
        probabilities = self.predict_proba([str(image_path)], batch_size=1)[0]
        key = int(probabilities.argmax())
        return self._classes[key], float(probabilities[key])

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @property
    def schema(self) -> Dict[str, Any]:
        return {
            "format_version": ARTIFACT_FORMAT_VERSION,
            "wasteml_version": __version__,
            "architecture": self._architecture,
            "image_size": self._image_size,
            "feature_dim": self._feature_dim,
            "classes": list(self._classes),
            "dataset_schema": self._dataset_schema,
        }

    def save(self, path: Union[str, Path], dataset_schema: Optional[Dict[str, Any]] = None) -> str:
        """Write weights and schema to a single zip file, replacing any existing one.

        Raises:
            SerializationError: If the model is untrained or the file cannot be written.
        """
        if self._head is None:
            raise SerializationError("Cannot save a model that has not been trained", path=path)
        if dataset_schema is not None:
            self._dataset_schema = dataset_schema

        buffer = io.BytesIO()
        torch.save({"backbone": self._backbone.state_dict(), "head": self._head.state_dict()}, buffer)

        try:
            output = ensure_parent_directory(path)
            with zipfile.ZipFile(output, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(WEIGHTS_ENTRY, buffer.getvalue())
                archive.writestr(SCHEMA_ENTRY, json.dumps(self.schema, indent=2))
        except OSError as e:
            raise SerializationError(f"Cannot write model to {path}: {e}", path=path) from e

        logger.info(f"Saved model to {output}")
        return str(output)

    @staticmethod
    def read_schema(path: Union[str, Path]) -> Dict[str, Any]:
        """Read only the schema of a saved model."""
        path = Path(path)
        if not path.is_file():
            raise MissingInputPathError(f"Model file not found: {path}", path=path)
        try:
            with zipfile.ZipFile(path) as archive:
                return json.loads(archive.read(SCHEMA_ENTRY).decode("utf-8"))
        except (zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
            raise SerializationError(f"Cannot read model schema from {path}: {e}", path=path) from e

    @classmethod
    def load(
        cls, path: Union[str, Path], device: Optional[Union[str, torch.device]] = None
    ) -> "ImageClassifierAdapter":
        """Restore a model written by save().

        Raises:
            MissingInputPathError: If the file does not exist.
            SerializationError: If the file is not a valid model artifact.
        """
        path = Path(path)
        schema = cls.read_schema(path)
        try:
            with zipfile.ZipFile(path) as archive:
                state = torch.load(
                    io.BytesIO(archive.read(WEIGHTS_ENTRY)), map_location="cpu", weights_only=True
                )
            backbone, feature_dim = cls._build_backbone(schema["architecture"], pretrained=False)
            backbone.load_state_dict(state["backbone"])
            head = nn.Linear(feature_dim, len(schema["classes"]))
            head.load_state_dict(state["head"])
        except (zipfile.BadZipFile, KeyError, ValueError, RuntimeError, OSError, pickle.UnpicklingError) as e:
            raise SerializationError(f"Cannot load model from {path}: {e}", path=path) from e

        logger.info(f"Loaded {schema['architecture']} model from {path}")
        return cls(
            backbone,
            feature_dim,
            schema["architecture"],
            image_size=schema.get("image_size", 224),
            head=head,
            classes=schema["classes"],
            dataset_schema=schema.get("dataset_schema"),
            device=device,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def classes(self) -> List[str]:
        return list(self._classes)

    @property
    def num_classes(self) -> int:
        return len(self._classes)

    @property
    def architecture(self) -> str:
        return self._architecture

    @property
    def image_size(self) -> int:
        return self._image_size

    @property
    def is_trained(self) -> bool:
        return self._head is not None

    @property
    def device(self) -> torch.device:
        return self._device
