"""
Dataset Scanning and Splitting
==============================

Builds labeled image records from a directory-per-class dataset and splits
them into reproducible train/test subsets.

Expected layout::

    WasteDataset/
        glass/
            b.png
        plastic/
            a.jpg
            bottles/
                c.jpg      <- still labeled "plastic"

Each immediate subdirectory of the root is a class. Files are collected
recursively beneath it and labeled with the class directory name. Files
placed directly in the root are ignored.

Example:
    >>> from wasteml.core.datasets import scan_dataset, split_records
    >>> records = scan_dataset("WasteDataset")
    >>> split = split_records(records, test_fraction=0.2, seed=1)
    >>> len(split.train), len(split.test)
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd
from sklearn.model_selection import train_test_split

from wasteml.core.exceptions import MissingInputPathError
from wasteml.core.files import ensure_parent_directory
from wasteml.core.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_IMAGE_EXTENSIONS = (".jpg", ".png")

IMAGE_PATH_COLUMN = "ImagePath"
LABEL_COLUMN = "Label"


@dataclass(frozen=True)
class LabeledImageRecord:
    """An image file paired with its class label."""

    image_path: str
    label: str

    def to_dict(self) -> Dict[str, str]:
        return {IMAGE_PATH_COLUMN: self.image_path, LABEL_COLUMN: self.label}


@dataclass
class DatasetSplit:
    """Disjoint train/test partition of a record list."""

    train: List[LabeledImageRecord] = field(default_factory=list)
    test: List[LabeledImageRecord] = field(default_factory=list)
    test_fraction: float = 0.2
    seed: int = 1

    @property
    def total(self) -> int:
        return len(self.train) + len(self.test)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "train_size": len(self.train),
            "test_size": len(self.test),
            "test_fraction": self.test_fraction,
            "seed": self.seed,
        }


def _matches_extension(name: str, extensions: Sequence[str], case_sensitive: bool) -> bool:
    if case_sensitive:
        return any(name.endswith(ext) for ext in extensions)
    lowered = name.lower()
    return any(lowered.endswith(ext.lower()) for ext in extensions)


def _iter_image_files(
    directory: Path, extensions: Sequence[str], case_sensitive: bool
) -> Iterable[Path]:
    """Yield matching files beneath directory, recursively, in sorted order."""
    for path in sorted(directory.rglob("*")):
        if path.is_file() and _matches_extension(path.name, extensions, case_sensitive):
            yield path


def _require_directory(path: Union[str, Path], what: str) -> Path:
    directory = Path(path)
    if not directory.exists():
        raise MissingInputPathError(f"{what} not found: {directory}", path=directory)
    if not directory.is_dir():
        raise MissingInputPathError(f"{what} is not a directory: {directory}", path=directory)
    return directory


def scan_dataset(
    root: Union[str, Path],
    extensions: Sequence[str] = SUPPORTED_IMAGE_EXTENSIONS,
    case_sensitive: bool = True,
) -> List[LabeledImageRecord]:
    """
    Walk a dataset root and build one record per image file.

    Args:
        root: Dataset root whose immediate subdirectories are class labels.
        extensions: File name suffixes to keep.
        case_sensitive: If False, ".JPG" matches ".jpg" as well.

    Returns:
        Records ordered by class directory name, then by file path.

    Raises:
        MissingInputPathError: If root does not exist or is not a directory.
    """
    root_dir = _require_directory(root, "Dataset root")

    records: List[LabeledImageRecord] = []
    class_dirs = sorted(p for p in root_dir.iterdir() if p.is_dir())

    for class_dir in class_dirs:
        label = class_dir.name
        for image_path in _iter_image_files(class_dir, extensions, case_sensitive):
            records.append(LabeledImageRecord(image_path=str(image_path), label=label))

    logger.info(f"Scanned {len(records)} images in {len(class_dirs)} classes from {root_dir}")
    return records


def scan_images(
    folder: Union[str, Path],
    extensions: Sequence[str] = SUPPORTED_IMAGE_EXTENSIONS,
    case_sensitive: bool = True,
) -> List[str]:
    """
    Recursively collect image files from a folder of unlabeled images.

    Raises:
        MissingInputPathError: If folder does not exist or is not a directory.
    """
    directory = _require_directory(folder, "Image folder")
    return [str(p) for p in _iter_image_files(directory, extensions, case_sensitive)]


def split_records(
    records: Sequence[LabeledImageRecord],
    test_fraction: float = 0.2,
    seed: int = 1,
) -> DatasetSplit:
    """
    Split records into train and test subsets.

    Delegates to scikit-learn's ``train_test_split`` with a fixed random
    state, so the same input order and seed always give the same partition.

    Raises:
        ValueError: If fewer than two records are given or the fraction is
            outside (0, 1).
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be between 0 and 1, got {test_fraction}")
    if len(records) < 2:
        raise ValueError(f"Need at least 2 records to split, got {len(records)}")

    train, test = train_test_split(
        list(records),
        test_size=test_fraction,
        random_state=seed,
        shuffle=True,
    )
    logger.debug(f"Split {len(records)} records into {len(train)} train / {len(test)} test")
    return DatasetSplit(train=list(train), test=list(test), test_fraction=test_fraction, seed=seed)


def count_labels(records: Iterable[LabeledImageRecord]) -> Dict[str, int]:
    """Count records per label, in first-seen order."""
    return dict(Counter(record.label for record in records))


def dataset_schema(records: Sequence[LabeledImageRecord]) -> Dict[str, Any]:
    """Describe the columns and label set of a record collection."""
    return {
        "columns": [
            {"name": IMAGE_PATH_COLUMN, "type": "string"},
            {"name": LABEL_COLUMN, "type": "string"},
        ],
        "labels": sorted({record.label for record in records}),
        "num_rows": len(records),
    }


def records_to_dataframe(records: Sequence[LabeledImageRecord]) -> pd.DataFrame:
    """Convert records to a two-column DataFrame."""
    return pd.DataFrame(
        [record.to_dict() for record in records],
        columns=[IMAGE_PATH_COLUMN, LABEL_COLUMN],
    )


def export_manifest(
    records: Sequence[LabeledImageRecord], output_path: Union[str, Path]
) -> str:
    """
    Write records to an ``ImagePath,Label`` CSV manifest.

    Returns:
        Path to the written file
    """
    path = ensure_parent_directory(output_path)
    records_to_dataframe(records).to_csv(path, index=False)
    return str(path)


def labels_of(records: Optional[Iterable[LabeledImageRecord]]) -> List[str]:
    """Sorted distinct labels across records (empty for None)."""
    if records is None:
        return []
    return sorted({record.label for record in records})
