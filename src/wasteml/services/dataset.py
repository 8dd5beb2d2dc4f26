"""
Service for labeled image dataset operations.
"""

from typing import Optional, Sequence

from wasteml.core.datasets import (
    SUPPORTED_IMAGE_EXTENSIONS,
    count_labels,
    export_manifest,
    scan_dataset,
    split_records,
)
from wasteml.core.exceptions import WasteMLError
from wasteml.core.logger import get_logger
from wasteml.models.dataset import ScanResult, SplitResult
from wasteml.repository.protocol import FileRepositoryProtocol

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


class DatasetService(BaseService):
    """
    Service for scanning and splitting directory-per-class image datasets.

    Example:
        >>> from wasteml.services import ServiceFactory
        >>> svc = ServiceFactory().dataset
        >>> result = svc.scan("WasteDataset")
        >>> if result.success:
        ...     print(result.data.label_counts)
    """

    def __init__(self, file_repository: FileRepositoryProtocol) -> None:
        super().__init__(file_repository=file_repository)

    def scan(
        self,
        root: str,
        extensions: Sequence[str] = SUPPORTED_IMAGE_EXTENSIONS,
        case_sensitive: bool = True,
        manifest_path: Optional[str] = None,
    ) -> ServiceResult[ScanResult]:
        """
        Scan a dataset root into labeled records.

        Args:
            root: Directory whose immediate subdirectories are class labels.
            extensions: Image file suffixes to keep.
            case_sensitive: Match suffixes case-sensitively.
            manifest_path: If given, also write an ImagePath,Label CSV there.

        Returns:
            ServiceResult containing ScanResult
        """
        error = self._validate_input_dir(root)
        if error:
            return ServiceResult.fail(error)

        try:
            records = scan_dataset(root, extensions=extensions, case_sensitive=case_sensitive)
            written = export_manifest(records, manifest_path) if manifest_path else None
        except WasteMLError as e:
            return ServiceResult.fail(str(e))
        except OSError as e:
            return ServiceResult.fail(f"Failed to scan dataset: {e}")

        result = ScanResult(
            root=root,
            records=records,
            label_counts=count_labels(records),
            manifest_path=written,
        )
        warnings = [] if records else [f"No images found under {root}"]
        return ServiceResult.ok(
            data=result,
            message=f"Found {result.total_images} images in {len(result.label_counts)} classes",
            warnings=warnings,
        )

    def split(
        self,
        root: str,
        test_fraction: float = 0.2,
        seed: int = 1,
        extensions: Sequence[str] = SUPPORTED_IMAGE_EXTENSIONS,
        case_sensitive: bool = True,
    ) -> ServiceResult[SplitResult]:
        """
        Scan a dataset root and split it into train and test subsets.

        Returns:
            ServiceResult containing SplitResult
        """
        scan_result = self.scan(root, extensions=extensions, case_sensitive=case_sensitive)
        if not scan_result.success:
            return ServiceResult.fail(scan_result.error)

        try:
            split = split_records(scan_result.data.records, test_fraction=test_fraction, seed=seed)
        except ValueError as e:
            return ServiceResult.fail(f"Cannot split dataset {root}: {e}")

        logger.info(f"Split {split.total} images: {len(split.train)} train, {len(split.test)} test")
        return ServiceResult.ok(
            data=SplitResult(
                root=root,
                split=split,
                train_counts=count_labels(split.train),
                test_counts=count_labels(split.test),
            ),
            message=f"{len(split.train)} train / {len(split.test)} test images",
        )
