"""torchvision adapters for wasteml.

Example:
    >>> from wasteml.adapters.torchvision import ImageClassifierAdapter, TrainingOptions
    >>> model = ImageClassifierAdapter.create(architecture="resnet101")
    >>> model.fit(split.train, split.test, TrainingOptions(epochs=10))
    >>> model.save("WasteClassificationModel.zip")

    >>> model = ImageClassifierAdapter.load("WasteClassificationModel.zip")
    >>> label, score = model.predict("TestImages/a.jpg")
"""

from wasteml.adapters.torchvision.classifier import (
    ARCHITECTURES,
    DEFAULT_ARCHITECTURE,
    EpochMetrics,
    ImageClassifierAdapter,
    TrainingOptions,
)
from wasteml.adapters.torchvision.data import build_transform, load_image, load_image_tensor

__all__ = [
    "ARCHITECTURES",
    "DEFAULT_ARCHITECTURE",
    "EpochMetrics",
    "ImageClassifierAdapter",
    "TrainingOptions",
    "build_transform",
    "load_image",
    "load_image_tensor",
]
