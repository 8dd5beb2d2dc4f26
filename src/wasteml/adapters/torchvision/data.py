"""Image loading and preprocessing for the torchvision classifier."""

from pathlib import Path
from typing import Iterator, List, Sequence, TypeVar, Union

import torch
from PIL import Image, UnidentifiedImageError
from torchvision import transforms

from wasteml.core.exceptions import MissingInputPathError, UnsupportedImageError

IMAGENET_MEAN = [0.485, 0.456, 0.406]
IMAGENET_STD = [0.229, 0.224, 0.225]

T = TypeVar("T")


def build_transform(image_size: int = 224) -> transforms.Compose:
    """Deterministic resize + normalize pipeline used for training and inference."""
    return transforms.Compose(
        [
            transforms.Resize((image_size, image_size)),
            transforms.ToTensor(),
            transforms.Normalize(IMAGENET_MEAN, IMAGENET_STD),
        ]
    )


def load_image(path: Union[str, Path]) -> Image.Image:
    """
    Open an image file and convert it to RGB.

    Raises:
        MissingInputPathError: If the file does not exist.
        UnsupportedImageError: If the file cannot be decoded as an image.
    """
    try:
        with Image.open(path) as img:
            return img.convert("RGB")
    except FileNotFoundError as e:
        raise MissingInputPathError(f"Image not found: {path}", path=path) from e
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError(f"Cannot decode image {path}: {e}", path=path) from e


def load_image_tensor(path: Union[str, Path], transform: transforms.Compose) -> torch.Tensor:
    return transform(load_image(path))


def iter_batches(items: Sequence[T], batch_size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of at most batch_size items."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for start in range(0, len(items), batch_size):
        yield list(items[start : start + batch_size])
