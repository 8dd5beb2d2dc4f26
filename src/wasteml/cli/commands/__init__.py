"""CLI command modules for wasteml."""

from .config import config
from .dataset import dataset
from .models import models
from .run import run

__all__ = [
    "config",
    "dataset",
    "models",
    "run",
]
