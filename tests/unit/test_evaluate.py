"""
Unit tests for wasteml.core.evaluate.
"""

import json

import numpy as np
import pandas as pd
import pytest

from wasteml.core.evaluate import (
    EvaluationMetrics,
    compute_metrics,
    format_metrics_report,
    format_metrics_summary,
    save_evaluation_results,
)

CLASSES = ["glass", "plastic"]


@pytest.fixture
def metrics() -> EvaluationMetrics:
    """Three glass images (one misclassified) and one plastic image."""
    return compute_metrics(
        y_true=["glass", "glass", "glass", "plastic"],
        probabilities=[[0.9, 0.1], [0.8, 0.2], [0.4, 0.6], [0.3, 0.7]],
        class_labels=CLASSES,
    )


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_micro_and_macro_accuracy(self, metrics):
        assert metrics.micro_accuracy == pytest.approx(0.75)
        assert metrics.macro_accuracy == pytest.approx((2 / 3 + 1.0) / 2)
        assert metrics.correct_predictions == 3
        assert metrics.total_samples == 4

    def test_log_loss(self, metrics):
        expected = -np.mean(np.log([0.9, 0.8, 0.4, 0.7]))
        assert metrics.log_loss == pytest.approx(expected)

    def test_log_loss_reduction_against_prior(self, metrics):
        prior = -(0.75 * np.log(0.75) + 0.25 * np.log(0.25))
        assert metrics.log_loss_reduction == pytest.approx(1 - metrics.log_loss / prior)

    def test_per_class_log_loss(self, metrics):
        assert metrics.per_class_log_loss["glass"] == pytest.approx(-np.mean(np.log([0.9, 0.8, 0.4])))
        assert metrics.per_class_log_loss["plastic"] == pytest.approx(-np.log(0.7))

    def test_confusion_matrix(self, metrics):
        assert metrics.confusion_matrix.tolist() == [[2, 1], [0, 1]]

    def test_perfect_predictions(self):
        result = compute_metrics(["glass", "plastic"], [[1.0, 0.0], [0.0, 1.0]], CLASSES)

        assert result.micro_accuracy == 1.0
        assert result.macro_accuracy == 1.0
        assert result.log_loss == pytest.approx(0.0, abs=1e-6)

    def test_single_class_has_zero_reduction(self):
        result = compute_metrics(["glass", "glass"], [[0.6, 0.4], [0.7, 0.3]], CLASSES)

        assert result.log_loss_reduction == 0.0

    def test_one_class_model(self):
        result = compute_metrics(["plastic", "plastic"], [[1.0], [1.0]], ["plastic"])

        assert result.micro_accuracy == 1.0
        assert result.macro_accuracy == 1.0
        assert result.log_loss == pytest.approx(0.0, abs=1e-9)
        assert result.log_loss_reduction == 0.0
        assert result.confusion_matrix.tolist() == [[2]]

    def test_float32_rows_do_not_warn(self, recwarn):
        probabilities = np.array([[0.7, 0.3], [0.2, 0.8]], dtype=np.float32) * np.float32(1.0000001)

        result = compute_metrics(["glass", "plastic"], probabilities, CLASSES)

        assert result.log_loss == pytest.approx(-np.mean(np.log([0.7, 0.8])), rel=1e-5)
        assert not [w for w in recwarn if "sum to one" in str(w.message)]

    def test_class_absent_from_ground_truth(self):
        result = compute_metrics(
            ["glass", "plastic"],
            [[0.8, 0.1, 0.1], [0.1, 0.8, 0.1]],
            ["glass", "plastic", "metal"],
        )

        assert result.micro_accuracy == 1.0
        assert "metal" not in result.per_class_log_loss
        assert result.confusion_matrix.shape == (3, 3)

    def test_empty_input_raises(self):
        with pytest.raises(ValueError, match="empty"):
            compute_metrics([], np.empty((0, 2)), CLASSES)

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="shape"):
            compute_metrics(["glass"], [[0.5, 0.3, 0.2]], CLASSES)

    def test_unknown_label_raises(self):
        with pytest.raises(ValueError, match="cardboard"):
            compute_metrics(["cardboard"], [[0.5, 0.5]], CLASSES)


class TestFormatting:
    """Tests for the console formats."""

    def test_summary_uses_two_decimals(self, metrics):
        assert format_metrics_summary(metrics).splitlines() == [
            "MicroAccuracy: 0.75",
            "MacroAccuracy: 0.83",
            "LogLoss: 0.40",
        ]

    def test_report_contains_all_sections(self, metrics):
        report = format_metrics_report(metrics)

        assert "MicroAccuracy:    0.7500 (3/4)" in report
        assert "LogLossReduction" in report
        assert "Per-Class LogLoss" in report
        assert "Confusion Matrix" in report

    def test_report_without_per_class(self, metrics):
        assert "Per-Class LogLoss" not in format_metrics_report(metrics, include_per_class=False)


class TestSaveEvaluationResults:
    """Tests for save_evaluation_results."""

    def test_json(self, metrics, tmp_path):
        path = save_evaluation_results(metrics, tmp_path / "eval.json", format="json")

        with open(path) as f:
            data = json.load(f)
        assert data["micro_accuracy"] == pytest.approx(0.75)
        assert data["confusion_matrix"] == [[2, 1], [0, 1]]
        assert data["class_labels"] == CLASSES

    def test_csv(self, metrics, tmp_path):
        path = save_evaluation_results(metrics, tmp_path / "eval.csv", format="csv")

        df = pd.read_csv(path)
        assert list(df["class"]) == CLASSES
        assert list(df["support"]) == [3, 1]
        assert list(df["correct"]) == [2, 1]

    def test_txt(self, metrics, tmp_path):
        path = save_evaluation_results(metrics, tmp_path / "nested" / "eval.txt", format="txt")

        with open(path) as f:
            assert "Model Evaluation Report" in f.read()

    def test_unsupported_format(self, metrics, tmp_path):
        with pytest.raises(ValueError, match="Unsupported format"):
            save_evaluation_results(metrics, tmp_path / "eval.xml", format="xml")
