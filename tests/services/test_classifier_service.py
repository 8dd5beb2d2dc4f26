"""Tests for ClassifierService, with the torchvision adapter replaced by a fake."""

from wasteml.adapters.torchvision import TrainingOptions
from wasteml.core.datasets import scan_dataset, split_records
from wasteml.services import ClassifierService


class TestClassifierServiceWithoutModel:
    """Operations that need a model fail cleanly before one exists."""

    def test_train_without_model(self, mock_repository):
        svc = ClassifierService(file_repository=mock_repository)

        result = svc.train([])

        assert not result.success
        assert "No model loaded" in result.error

    def test_evaluate_without_model(self, mock_repository):
        result = ClassifierService(file_repository=mock_repository).evaluate([])

        assert not result.success

    def test_save_without_model(self, mock_repository):
        result = ClassifierService(file_repository=mock_repository).save_model("m.zip")

        assert not result.success

    def test_load_missing_file(self, mock_repository):
        result = ClassifierService(file_repository=mock_repository).load_model("m.zip")

        assert not result.success
        assert "does not exist" in result.error

    def test_list_architectures(self, mock_repository):
        result = ClassifierService(file_repository=mock_repository).list_architectures()

        assert "resnet101" in result.data
        assert result.metadata["default"] == "resnet101"


class TestClassifierServiceLifecycle:
    """create -> train -> evaluate -> save -> load with a fake adapter."""

    def test_full_lifecycle(self, factory, fake_adapter, waste_dataset, tmp_path):
        split = split_records(scan_dataset(waste_dataset), seed=1)
        svc = factory.classifier
        seen = []

        assert svc.create_model(architecture="resnet18").success
        train = svc.train(split.train, split.test, TrainingOptions(epochs=2), metrics_callback=seen.append)
        assert train.success
        assert train.data.epochs == 2
        assert train.data.classes == ["glass", "plastic"]
        assert train.data.train_size == 9
        assert train.data.validation_size == 3
        assert [m.dataset for m in seen] == ["Train", "Validation", "Train", "Validation"]

        evaluation = svc.evaluate(split.test)
        assert evaluation.success
        assert evaluation.data.micro_accuracy == 1.0

        model_path = tmp_path / "models" / "model.zip"
        saved = svc.save_model(str(model_path), dataset_schema={"num_rows": 12})
        assert saved.success
        assert saved.data == str(model_path)

        reloaded = factory.classifier
        assert reloaded.load_model(str(model_path)).success
        assert reloaded.adapter.classes == ["glass", "plastic"]

        info = factory.classifier.get_model_info(str(model_path))
        assert info.success
        assert info.data.schema["dataset_schema"] == {"num_rows": 12}
        assert info.data.size_bytes > 0

    def test_create_model_rejects_unknown_architecture(self, factory):
        result = factory.classifier.create_model(architecture="vgg16", pretrained=False)

        assert not result.success
        assert "Unsupported architecture" in result.error
