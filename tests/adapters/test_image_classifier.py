"""Tests for ImageClassifierAdapter.

Training tests build a randomly initialised resnet18 on 32x32 inputs so no
weights are downloaded; they are marked slow.
"""

import zipfile

import numpy as np
import pytest

from tests.mocks.images import BLUE, RED, make_image
from wasteml.adapters.torchvision import ARCHITECTURES, ImageClassifierAdapter, TrainingOptions
from wasteml.adapters.torchvision.classifier import SCHEMA_ENTRY, WEIGHTS_ENTRY, EpochMetrics
from wasteml.core.datasets import LabeledImageRecord, scan_dataset, split_records
from wasteml.core.exceptions import (
    InferenceError,
    MissingInputPathError,
    SerializationError,
    TrainingError,
    UnsupportedImageError,
)


def _tiny_adapter() -> ImageClassifierAdapter:
    return ImageClassifierAdapter.create(
        architecture="resnet18", pretrained=False, image_size=32, device="cpu"
    )


@pytest.fixture(scope="module")
def tiny_split(tmp_path_factory):
    root = tmp_path_factory.mktemp("data") / "WasteDataset"
    for i in range(5):
        make_image(root / "glass" / f"g{i}.png", RED)
        make_image(root / "plastic" / f"p{i}.jpg", BLUE)
    return split_records(scan_dataset(root), test_fraction=0.2, seed=1)


@pytest.fixture(scope="module")
def trained(tiny_split):
    adapter = _tiny_adapter()
    history = adapter.fit(tiny_split.train, tiny_split.test, TrainingOptions(epochs=2, batch_size=4))
    return adapter, history


class TestOptions:
    """Tests for TrainingOptions and EpochMetrics."""

    def test_defaults(self):
        options = TrainingOptions()

        assert (options.epochs, options.batch_size, options.learning_rate) == (10, 10, 0.01)
        assert options.reuse_train_bottleneck and options.reuse_validation_bottleneck

    @pytest.mark.parametrize("kwargs", [{"epochs": 0}, {"batch_size": 0}, {"learning_rate": 0.0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            TrainingOptions(**kwargs)

    def test_epoch_metrics_str(self):
        text = str(EpochMetrics(3, "Validation", 0.5, 0.69314, 0.01))

        assert text == (
            "Phase: Training, Dataset used: Validation, Epoch: 3, "
            "Accuracy: 0.5000, Cross-Entropy: 0.6931"
        )


class TestUntrained:
    """Behaviour before fit() or load()."""

    def test_default_architecture_is_resnet101(self):
        assert "resnet101" in ARCHITECTURES

    def test_unknown_architecture(self):
        with pytest.raises(ValueError, match="Unsupported architecture"):
            ImageClassifierAdapter.create(architecture="alexnet", pretrained=False)

    def test_predict_requires_training(self, tmp_path):
        adapter = _tiny_adapter()

        with pytest.raises(InferenceError):
            adapter.predict(make_image(tmp_path / "x.png"))

    def test_save_requires_training(self, tmp_path):
        with pytest.raises(SerializationError):
            _tiny_adapter().save(tmp_path / "model.zip")

    def test_fit_on_empty_training_set(self):
        with pytest.raises(TrainingError):
            _tiny_adapter().fit([])


class TestLoadErrors:
    """Errors raised when reading artifacts."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingInputPathError):
            ImageClassifierAdapter.load(tmp_path / "absent.zip")

    def test_not_a_zip(self, tmp_path):
        path = tmp_path / "model.zip"
        path.write_text("garbage")

        with pytest.raises(SerializationError):
            ImageClassifierAdapter.load(path)

    def test_zip_without_weights(self, tmp_path):
        path = tmp_path / "model.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr(SCHEMA_ENTRY, '{"architecture": "resnet18", "classes": ["a", "b"]}')

        with pytest.raises(SerializationError):
            ImageClassifierAdapter.load(path)


@pytest.mark.slow
class TestTraining:
    """Training, inference and persistence with a real network."""

    def test_history_alternates_train_and_validation(self, trained):
        _, history = trained

        assert [(m.epoch, m.dataset) for m in history] == [
            (1, "Train"),
            (1, "Validation"),
            (2, "Train"),
            (2, "Validation"),
        ]
        assert all(0.0 <= m.accuracy <= 1.0 for m in history)

    def test_classes_sorted(self, trained):
        adapter, _ = trained

        assert adapter.classes == ["glass", "plastic"]
        assert adapter.is_trained

    def test_probabilities(self, trained, tiny_split):
        adapter, _ = trained

        probabilities = adapter.transform(tiny_split.test)

        assert probabilities.shape == (len(tiny_split.test), 2)
        assert np.allclose(probabilities.sum(axis=1), 1.0, atol=1e-5)

    def test_predict_returns_known_label(self, trained, tmp_path):
        adapter, _ = trained

        label, score = adapter.predict(make_image(tmp_path / "new.png", BLUE))

        assert label in adapter.classes
        assert 0.0 <= score <= 1.0

    def test_evaluate(self, trained, tiny_split):
        adapter, _ = trained

        metrics = adapter.evaluate(tiny_split.test)

        assert metrics.total_samples == len(tiny_split.test)
        assert 0.0 <= metrics.micro_accuracy <= 1.0
        assert metrics.log_loss >= 0.0

    def test_save_and_load_give_identical_results(self, trained, tiny_split, tmp_path):
        adapter, _ = trained
        path = tmp_path / "out" / "WasteClassificationModel.zip"

        adapter.save(path, dataset_schema={"num_rows": 10})
        reloaded = ImageClassifierAdapter.load(path, device="cpu")

        assert reloaded.classes == adapter.classes
        assert reloaded.architecture == "resnet18"
        assert reloaded.image_size == 32
        assert np.allclose(reloaded.transform(tiny_split.test), adapter.transform(tiny_split.test), atol=1e-6)
        assert reloaded.evaluate(tiny_split.test).log_loss == pytest.approx(
            adapter.evaluate(tiny_split.test).log_loss
        )

    def test_artifact_layout_and_overwrite(self, trained, tmp_path):
        adapter, _ = trained
        path = tmp_path / "model.zip"
        path.write_text("old content")

        adapter.save(path)

        with zipfile.ZipFile(path) as archive:
            assert sorted(archive.namelist()) == sorted([WEIGHTS_ENTRY, SCHEMA_ENTRY])
        schema = ImageClassifierAdapter.read_schema(path)
        assert schema["classes"] == ["glass", "plastic"]
        assert schema["architecture"] == "resnet18"

    def test_bottleneck_reuse_computes_features_once(self, tiny_split, mocker):
        adapter = _tiny_adapter()
        spy = mocker.spy(adapter, "_compute_features")

        adapter.fit(tiny_split.train, tiny_split.test, TrainingOptions(epochs=3))

        assert spy.call_count == 2

    def test_without_reuse_features_recomputed_each_epoch(self, tiny_split, mocker):
        adapter = _tiny_adapter()
        spy = mocker.spy(adapter, "_compute_features")
        options = TrainingOptions(
            epochs=3, reuse_train_bottleneck=False, reuse_validation_bottleneck=False
        )

        adapter.fit(tiny_split.train, tiny_split.test, options)

        assert spy.call_count == 6

    def test_undecodable_training_image(self, tiny_split, tmp_path):
        bad = tmp_path / "glass" / "broken.png"
        bad.parent.mkdir(parents=True)
        bad.write_bytes(b"not an image")

        with pytest.raises(UnsupportedImageError):
            _tiny_adapter().fit(list(tiny_split.train) + [LabeledImageRecord(str(bad), "glass")])

    def test_saving_twice_to_the_same_path(self, trained, tiny_split, tmp_path):
        adapter, _ = trained
        path = tmp_path / "model.zip"

        adapter.save(path)
        first = ImageClassifierAdapter.load(path, device="cpu").evaluate(tiny_split.test)
        adapter.save(path)
        second = ImageClassifierAdapter.load(path, device="cpu").evaluate(tiny_split.test)

        with zipfile.ZipFile(path) as archive:
            assert sorted(archive.namelist()) == sorted([WEIGHTS_ENTRY, SCHEMA_ENTRY])
        assert second.log_loss == pytest.approx(first.log_loss)
        assert second.micro_accuracy == first.micro_accuracy
        assert second.confusion_matrix.tolist() == first.confusion_matrix.tolist()

    def test_two_image_dataset(self, tmp_path):
        root = tmp_path / "WasteDataset"
        plastic = make_image(root / "plastic" / "a.jpg", BLUE)
        make_image(root / "glass" / "b.png", RED)
        split = split_records(scan_dataset(root), test_fraction=0.5, seed=1)
        copy = tmp_path / "TestImages" / "a.jpg"
        copy.parent.mkdir()
        copy.write_bytes(plastic.read_bytes())

        adapter = _tiny_adapter()
        adapter.fit(split.train, split.test, TrainingOptions(epochs=1))
        label, _ = adapter.predict(copy)

        assert (len(split.train), len(split.test)) == (1, 1)
        assert adapter.classes == ["glass", "plastic"]
        assert label in {"plastic", "glass"}
