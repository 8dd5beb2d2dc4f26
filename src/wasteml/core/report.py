"""
Prediction Reports
==================

Turns per-image predictions into the ``Predictions.csv`` report and the
class distribution summary.

The CSV has a fixed header ``ImageName,PredictedLabel`` and one row per image
in prediction order. An image whose label is unknown gets an empty second
field. Rows are terminated by a single ``\\n``.
"""

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from wasteml.core.files import TextFile, ensure_parent_directory

CSV_HEADER = ("ImageName", "PredictedLabel")


@dataclass(frozen=True)
class PredictionRecord:
    """Prediction for one image file."""

    image_path: str
    predicted_label: Optional[str]
    score: Optional[float] = None

    @property
    def image_name(self) -> str:
        """File name without directories."""
        return Path(self.image_path).name

    def to_dict(self) -> Dict[str, object]:
        return {
            "image_path": self.image_path,
            "image_name": self.image_name,
            "predicted_label": self.predicted_label,
            "score": self.score,
        }


def _format_row(fields: Sequence[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="").writerow(fields)
    return buffer.getvalue()


def build_csv_lines(predictions: Iterable[PredictionRecord]) -> List[str]:
    """
    Build the report lines, header first, without line terminators.

    Fields that contain a comma, quote or newline are quoted.
    """
    lines = [_format_row(CSV_HEADER)]
    for prediction in predictions:
        lines.append(_format_row([prediction.image_name, prediction.predicted_label or ""]))
    return lines


def accumulate_class_counts(predictions: Iterable[PredictionRecord]) -> Dict[str, int]:
    """
    Count predictions per label in first-seen order.

    Predictions with a null label are left out.
    """
    counts: Dict[str, int] = {}
    for prediction in predictions:
        if prediction.predicted_label is None:
            continue
        counts[prediction.predicted_label] = counts.get(prediction.predicted_label, 0) + 1
    return counts


def write_predictions_csv(lines: Sequence[str], output_path: Union[str, Path]) -> str:
    """
    Write prebuilt report lines to disk, replacing any existing file.

    Returns:
        Path to the written file
    """
    path = ensure_parent_directory(output_path)
    with TextFile(path, mode="w", newline="") as f:
        for line in lines:
            f.write(line + "\n")
    return str(path)


def format_class_distribution(counts: Dict[str, int]) -> List[str]:
    """One ``label: count`` line per class, in the order given."""
    return [f"{label}: {count}" for label, count in counts.items()]
