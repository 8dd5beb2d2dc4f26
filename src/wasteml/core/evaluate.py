"""
Model Evaluation Module
=======================

This module computes multiclass classification metrics from ground-truth
labels and predicted class probabilities, formats them for the console, and
saves them to disk.

Metrics:
- Micro accuracy: fraction of samples classified correctly
- Macro accuracy: mean of per-class accuracies (balanced accuracy)
- Log-loss: cross-entropy of the predicted probabilities
- Log-loss reduction: improvement of log-loss over a class-prior predictor
- Per-class log-loss and a confusion matrix

Example:
    >>> from wasteml.core.evaluate import compute_metrics, format_metrics_summary
    >>> metrics = compute_metrics(
    ...     y_true=["glass", "plastic"],
    ...     probabilities=[[0.9, 0.1], [0.2, 0.8]],
    ...     class_labels=["glass", "plastic"],
    ... )
    >>> print(format_metrics_summary(metrics))
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, balanced_accuracy_score, confusion_matrix, log_loss

from wasteml.core.files import TextFile, ensure_parent_directory


@dataclass
class EvaluationMetrics:
    """
    Results from model evaluation.

    Attributes:
        micro_accuracy: Correct predictions / total samples.
        macro_accuracy: Mean of per-class accuracies over the classes present
            in the ground truth.
        log_loss: Mean cross-entropy of the predicted probabilities.
        log_loss_reduction: 1 - log_loss / prior_log_loss, where the prior
            predicts the class frequencies of the evaluated set.
        per_class_log_loss: Mean log-loss of the samples of each class.
        confusion_matrix: NxN array, rows are true labels and columns are
            predicted labels, ordered as class_labels.
        class_labels: Ordered list of class label names.
        total_samples: Number of samples evaluated.
        correct_predictions: Number of correctly classified samples.
    """

    micro_accuracy: float
    macro_accuracy: float
    log_loss: float
    log_loss_reduction: float
    per_class_log_loss: Dict[str, float]
    confusion_matrix: np.ndarray
    class_labels: List[str]
    total_samples: int
    correct_predictions: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "micro_accuracy": self.micro_accuracy,
            "macro_accuracy": self.macro_accuracy,
            "log_loss": self.log_loss,
            "log_loss_reduction": self.log_loss_reduction,
            "per_class_log_loss": self.per_class_log_loss,
            "confusion_matrix": self.confusion_matrix.tolist(),
            "class_labels": self.class_labels,
            "total_samples": self.total_samples,
            "correct_predictions": self.correct_predictions,
        }


def _prior_log_loss(y_idx: np.ndarray, n_classes: int) -> float:
    """Log-loss of a predictor that always outputs the label frequencies."""
    counts = np.bincount(y_idx, minlength=n_classes).astype(np.float64)
    priors = counts / counts.sum()
    present = priors > 0
    return float(-(priors[present] * np.log(priors[present])).sum())


def compute_metrics(
    y_true: Sequence[str],
    probabilities: Union[Sequence[Sequence[float]], np.ndarray],
    class_labels: Sequence[str],
) -> EvaluationMetrics:
    """
    Compute multiclass metrics from ground truth and class probabilities.

    Args:
        y_true: Ground-truth label for each sample.
        probabilities: (n_samples, n_classes) probabilities; column order
            follows class_labels.
        class_labels: Label of each probability column.

    Returns:
        EvaluationMetrics for the samples.

    Raises:
        ValueError: If inputs are empty, shapes disagree, or a true label is
            not among class_labels.
    """
    probs = np.asarray(probabilities, dtype=np.float64)
    labels = list(class_labels)

    if len(y_true) == 0:
        raise ValueError("Cannot compute metrics on empty data")
    if probs.ndim != 2 or probs.shape != (len(y_true), len(labels)):
        raise ValueError(
            f"Probabilities shape {probs.shape} does not match "
            f"({len(y_true)} samples, {len(labels)} classes)"
        )

    label_to_idx = {label: idx for idx, label in enumerate(labels)}
    unknown = sorted(set(y_true) - set(labels))
    if unknown:
        raise ValueError(f"Labels not known to the model: {unknown}")

    # float32 softmax rows drift from 1 once widened to float64
    totals = probs.sum(axis=1, keepdims=True)
    probs = np.divide(probs, totals, out=np.zeros_like(probs), where=totals > 0)

    y_idx = np.array([label_to_idx[label] for label in y_true], dtype=np.int64)
    pred_idx = probs.argmax(axis=1)
    class_indices = list(range(len(labels)))

    micro = float(accuracy_score(y_idx, pred_idx))
    # balanced_accuracy_score averages recall over the classes present in y_true
    macro = float(balanced_accuracy_score(y_idx, pred_idx))

    eps = np.finfo(np.float64).eps
    sample_losses = -np.log(np.clip(probs[np.arange(len(y_idx)), y_idx], eps, 1.0))
    # log_loss needs at least two labels
    if len(labels) < 2:
        loss = float(sample_losses.mean())
    else:
        loss = float(log_loss(y_idx, probs, labels=class_indices))

    prior = _prior_log_loss(y_idx, len(labels))
    reduction = 1.0 - loss / prior if prior > 0 else 0.0

    per_class = {}
    for idx, label in enumerate(labels):
        mask = y_idx == idx
        if mask.any():
            per_class[label] = float(sample_losses[mask].mean())

    return EvaluationMetrics(
        micro_accuracy=micro,
        macro_accuracy=macro,
        log_loss=loss,
        log_loss_reduction=float(reduction),
        per_class_log_loss=per_class,
        confusion_matrix=confusion_matrix(y_idx, pred_idx, labels=class_indices),
        class_labels=labels,
        total_samples=len(y_idx),
        correct_predictions=int((pred_idx == y_idx).sum()),
    )


def format_metrics_summary(metrics: EvaluationMetrics) -> str:
    """The three headline metrics with two decimals, one per line."""
    return "\n".join(
        [
            f"MicroAccuracy: {metrics.micro_accuracy:.2f}",
            f"MacroAccuracy: {metrics.macro_accuracy:.2f}",
            f"LogLoss: {metrics.log_loss:.2f}",
        ]
    )


def format_metrics_report(metrics: EvaluationMetrics, include_per_class: bool = True) -> str:
    """
    Format evaluation results as a human-readable report.

    Args:
        metrics: EvaluationMetrics to format
        include_per_class: Include per-class log-loss breakdown

    Returns:
        Formatted string report
    """
    lines = [
        "=" * 60,
        "Model Evaluation Report",
        "=" * 60,
        "",
        "Overall Metrics:",
        f"  MicroAccuracy:    {metrics.micro_accuracy:.4f} "
        f"({metrics.correct_predictions}/{metrics.total_samples})",
        f"  MacroAccuracy:    {metrics.macro_accuracy:.4f}",
        f"  LogLoss:          {metrics.log_loss:.4f}",
        f"  LogLossReduction: {metrics.log_loss_reduction:.4f}",
        "",
    ]

    if include_per_class and metrics.per_class_log_loss:
        lines.extend(
            [
                "Per-Class LogLoss:",
                "-" * 60,
            ]
        )
        for label in metrics.class_labels:
            if label in metrics.per_class_log_loss:
                lines.append(f"  {label:<30} {metrics.per_class_log_loss[label]:>10.4f}")
        lines.append("")

    lines.extend(
        [
            "Confusion Matrix:",
            "-" * 60,
        ]
    )

    max_label_len = max(len(label) for label in metrics.class_labels)
    header = " " * (max_label_len + 2) + "  ".join(f"{l[:8]:>8}" for l in metrics.class_labels)
    lines.append(header)

    for i, label in enumerate(metrics.class_labels):
        row_values = "  ".join(f"{v:>8}" for v in metrics.confusion_matrix[i])
        lines.append(f"{label:<{max_label_len}}  {row_values}")

    lines.append("=" * 60)

    return "\n".join(lines)


def save_evaluation_results(
    metrics: EvaluationMetrics,
    output_path: Union[str, Path],
    format: str = "json",
) -> str:
    """
    Save evaluation results to a file.

    Args:
        metrics: EvaluationMetrics to save
        output_path: Path to save results
        format: Output format ('json', 'csv', or 'txt')

    Returns:
        Path to saved file
    """
    if format not in ("json", "csv", "txt"):
        raise ValueError(f"Unsupported format: {format}. Use 'json', 'csv', or 'txt'")

    path = ensure_parent_directory(output_path)

    if format == "json":
        with TextFile(path, mode="w") as f:
            json.dump(metrics.to_dict(), f.handle, indent=2)

    elif format == "csv":
        rows = [
            {
                "class": label,
                "log_loss": metrics.per_class_log_loss.get(label),
                "support": int(metrics.confusion_matrix[i, :].sum()),
                "correct": int(metrics.confusion_matrix[i, i]),
            }
            for i, label in enumerate(metrics.class_labels)
        ]
        pd.DataFrame(rows).to_csv(path, index=False)

    else:
        with TextFile(path, mode="w") as f:
            f.write(format_metrics_report(metrics))

    return str(path)
