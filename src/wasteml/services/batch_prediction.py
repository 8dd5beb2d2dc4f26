"""
Batch prediction service
========================

Runs a trained classifier over every image in a folder, one image at a time,
and builds the CSV report and the class distribution as it goes.

A failure on any image aborts the whole batch; nothing is skipped silently.
"""

from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from wasteml.core.datasets import SUPPORTED_IMAGE_EXTENSIONS, scan_images
from wasteml.core.exceptions import WasteMLError
from wasteml.core.logger import get_logger
from wasteml.core.report import (
    PredictionRecord,
    accumulate_class_counts,
    build_csv_lines,
    write_predictions_csv,
)
from wasteml.models.prediction import BatchPredictionResult
from wasteml.repository.protocol import FileRepositoryProtocol

from .base import BaseService, BatchProgress, ServiceResult

logger = get_logger(__name__)

PredictionCallback = Callable[[PredictionRecord], None]


class BatchPredictionService(BaseService):
    """
    Service for predicting a folder of unlabeled images.

    The classifier is anything with ``predict(image_path) -> (label, score)``;
    in practice an ImageClassifierAdapter held by ClassifierService.

    Example:
        >>> svc = ServiceFactory().batch_prediction
        >>> result = svc.predict_folder("TestImages", classifier.adapter)
        >>> svc.write_report(result.data, "Predictions.csv")
    """

    def __init__(self, file_repository: FileRepositoryProtocol) -> None:
        super().__init__(file_repository=file_repository)

    def predict_folder(
        self,
        folder: str,
        model: Any,
        on_prediction: Optional[PredictionCallback] = None,
        min_confidence: float = 0.0,
        extensions: Sequence[str] = SUPPORTED_IMAGE_EXTENSIONS,
        case_sensitive: bool = True,
    ) -> ServiceResult[BatchPredictionResult]:
        """
        Predict a label for every image in a folder.

        Args:
            folder: Folder searched recursively for images.
            model: Trained classifier.
            on_prediction: Called with each PredictionRecord as soon as it exists.
            min_confidence: Predictions scoring below this get a null label.
            extensions: Image file suffixes to keep.
            case_sensitive: Match suffixes case-sensitively.

        Returns:
            ServiceResult containing BatchPredictionResult
        """
        if model is None:
            return ServiceResult.fail("No model loaded for prediction")

        error = self._validate_input_dir(folder)
        if error:
            return ServiceResult.fail(error)

        try:
            image_paths = scan_images(folder, extensions=extensions, case_sensitive=case_sensitive)
        except WasteMLError as e:
            return ServiceResult.fail(str(e))

        progress = BatchProgress(total=len(image_paths))
        self._report_progress(progress)

        predictions = []
        for image_path in image_paths:
            progress.current_file = image_path
            try:
                label, score = model.predict(image_path)
            except WasteMLError as e:
                logger.error(f"Prediction aborted at {image_path}: {e}")
                return ServiceResult.fail(str(e), processed=len(predictions))

            if score < min_confidence:
                label = None
            prediction = PredictionRecord(image_path=image_path, predicted_label=label, score=score)
            predictions.append(prediction)
            if on_prediction:
                on_prediction(prediction)

            progress.completed += 1
            self._report_progress(progress)

        result = BatchPredictionResult(
            predictions=predictions,
            class_counts=accumulate_class_counts(predictions),
            csv_lines=build_csv_lines(predictions),
        )
        warnings = [] if predictions else [f"No images found in {folder}"]
        return ServiceResult.ok(
            data=result,
            message=f"Predicted {len(predictions)} images",
            warnings=warnings,
        )

    def write_report(self, result: BatchPredictionResult, output_path: str) -> ServiceResult[str]:
        """Write the CSV report of a batch, replacing any existing file."""
        try:
            written = write_predictions_csv(result.csv_lines, output_path)
        except OSError as e:
            return ServiceResult.fail(f"Failed to write predictions to {output_path}: {e}")

        result.output_path = written
        return ServiceResult.ok(data=written, message=f"Predictions saved to {Path(written)}")
