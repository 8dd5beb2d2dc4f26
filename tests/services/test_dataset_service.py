"""Tests for DatasetService."""

from wasteml.services import DatasetService, ServiceResult


class TestDatasetServiceScan:
    """Tests for DatasetService.scan."""

    def test_scan_counts_labels(self, factory, waste_dataset):
        result = factory.dataset.scan(str(waste_dataset))

        assert result.success
        assert result.data.total_images == 12
        assert result.data.label_counts == {"glass": 6, "plastic": 6}
        assert result.data.manifest_path is None

    def test_scan_writes_manifest(self, factory, waste_dataset, tmp_path):
        manifest = tmp_path / "manifest.csv"

        result = factory.dataset.scan(str(waste_dataset), manifest_path=str(manifest))

        assert result.success
        assert result.data.manifest_path == str(manifest)
        assert manifest.read_text().startswith("ImagePath,Label")

    def test_scan_missing_root_fails(self, mock_repository):
        svc = DatasetService(file_repository=mock_repository)

        result = svc.scan("WasteDataset")

        assert not result.success
        assert "does not exist" in result.error

    def test_scan_requires_directory(self, mock_repository):
        mock_repository.add_file("WasteDataset")
        svc = DatasetService(file_repository=mock_repository)

        result = svc.scan("WasteDataset")

        assert not result.success
        assert "Not a directory" in result.error

    def test_scan_empty_dataset_warns(self, factory, tmp_path):
        (tmp_path / "empty").mkdir()

        result = factory.dataset.scan(str(tmp_path / "empty"))

        assert result.success
        assert result.data.total_images == 0
        assert result.warnings

    def test_scan_result_to_dict(self, factory, waste_dataset):
        data = factory.dataset.scan(str(waste_dataset)).to_dict()["data"]

        assert data["total_images"] == 12
        assert data["num_classes"] == 2
        assert "records" not in data


class TestDatasetServiceSplit:
    """Tests for DatasetService.split."""

    def test_split_sizes(self, factory, waste_dataset):
        result = factory.dataset.split(str(waste_dataset), test_fraction=0.2, seed=1)

        assert result.success
        split = result.data.split
        assert len(split.train) == 9
        assert len(split.test) == 3
        assert sum(result.data.train_counts.values()) == 9
        assert sum(result.data.test_counts.values()) == 3

    def test_split_is_reproducible(self, factory, waste_dataset):
        first = factory.dataset.split(str(waste_dataset), seed=1).data.split
        second = factory.dataset.split(str(waste_dataset), seed=1).data.split

        assert first.test == second.test

    def test_split_too_small_fails(self, factory, tmp_path):
        (tmp_path / "data" / "glass").mkdir(parents=True)

        result = factory.dataset.split(str(tmp_path / "data"))

        assert not result.success
        assert "Cannot split" in result.error

    def test_split_propagates_scan_failure(self, factory, tmp_path):
        result = factory.dataset.split(str(tmp_path / "missing"))

        assert isinstance(result, ServiceResult)
        assert not result.success
