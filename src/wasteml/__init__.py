"""
WasteML - Waste Image Classification
====================================

Version: 0.1.0
"""

__version__ = "0.1.0"

# Re-export commonly used helpers for convenience
from wasteml.core.datasets import (
    SUPPORTED_IMAGE_EXTENSIONS,
    LabeledImageRecord,
    scan_dataset,
    scan_images,
    split_records,
)

__all__ = [
    "__version__",
    # Dataset helpers
    "SUPPORTED_IMAGE_EXTENSIONS",
    "LabeledImageRecord",
    "scan_dataset",
    "scan_images",
    "split_records",
]
