"""Tests for BatchPredictionService."""

import pytest

from tests.mocks.fake_classifier import FakeClassifier
from tests.mocks.images import make_image
from wasteml.core.exceptions import UnsupportedImageError


@pytest.fixture
def model():
    return FakeClassifier(classes=["glass", "plastic"])


class TestPredictFolder:
    """Tests for BatchPredictionService.predict_folder."""

    def test_predicts_every_image_in_order(self, factory, model, prediction_folder):
        seen = []

        result = factory.batch_prediction.predict_folder(
            str(prediction_folder), model, on_prediction=seen.append
        )

        assert result.success
        batch = result.data
        assert [p.image_name for p in batch.predictions] == ["a.jpg", "b.png", "c.png"]
        assert [p.predicted_label for p in batch.predictions] == ["plastic", "glass", "glass"]
        assert seen == batch.predictions

    def test_counts_and_csv_lines(self, factory, model, prediction_folder):
        batch = factory.batch_prediction.predict_folder(str(prediction_folder), model).data

        assert list(batch.class_counts.items()) == [("plastic", 1), ("glass", 2)]
        assert batch.csv_lines == [
            "ImageName,PredictedLabel",
            "a.jpg,plastic",
            "b.png,glass",
            "c.png,glass",
        ]

    def test_below_min_confidence_gives_null_label(self, factory, model, prediction_folder):
        batch = factory.batch_prediction.predict_folder(
            str(prediction_folder), model, min_confidence=0.95
        ).data

        assert all(p.predicted_label is None for p in batch.predictions)
        assert batch.class_counts == {}
        assert batch.csv_lines[1:] == ["a.jpg,", "b.png,", "c.png,"]

    def test_empty_folder(self, factory, model, tmp_path):
        (tmp_path / "TestImages").mkdir()

        result = factory.batch_prediction.predict_folder(str(tmp_path / "TestImages"), model)

        assert result.success
        assert result.data.csv_lines == ["ImageName,PredictedLabel"]
        assert result.warnings

    def test_missing_folder_fails(self, factory, model, tmp_path):
        result = factory.batch_prediction.predict_folder(str(tmp_path / "nope"), model)

        assert not result.success

    def test_no_model_fails(self, factory, prediction_folder):
        result = factory.batch_prediction.predict_folder(str(prediction_folder), None)

        assert not result.success
        assert "No model" in result.error

    def test_aborts_on_first_failure(self, factory, tmp_path, mocker):
        folder = tmp_path / "TestImages"
        make_image(folder / "a.jpg")
        make_image(folder / "b.jpg")
        model = mocker.Mock()
        model.predict.side_effect = [("glass", 0.9), UnsupportedImageError("bad image", path="b.jpg")]

        result = factory.batch_prediction.predict_folder(str(folder), model)

        assert not result.success
        assert "bad image" in result.error
        assert result.metadata["processed"] == 1

    def test_reports_progress(self, factory, model, prediction_folder):
        updates = []
        svc = factory.batch_prediction
        svc.set_progress_callback(lambda p: updates.append((p.completed, p.total)))

        svc.predict_folder(str(prediction_folder), model)

        assert updates[0] == (0, 3)
        assert updates[-1] == (3, 3)


class TestWriteReport:
    """Tests for BatchPredictionService.write_report."""

    def test_writes_csv(self, factory, model, prediction_folder, tmp_path):
        svc = factory.batch_prediction
        batch = svc.predict_folder(str(prediction_folder), model).data
        output = tmp_path / "Predictions.csv"

        result = svc.write_report(batch, str(output))

        assert result.success
        assert batch.output_path == str(output)
        assert output.read_text() == "ImageName,PredictedLabel\na.jpg,plastic\nb.png,glass\nc.png,glass\n"
