"""
Console output shared by the ``run`` and ``models`` commands.

These lines are plain ``click.echo`` text so they stay stable for scripts
that parse them.
"""

from typing import Any, Dict, Optional

import click

from wasteml.cli.progress import ProgressBar
from wasteml.cli.service_helpers import exit_with_error, handle_result, services
from wasteml.core.config import Config


def echo_epoch(metrics: Any) -> None:
    click.echo(str(metrics))


def echo_evaluation(metrics: Any) -> None:
    from wasteml.core.evaluate import format_metrics_summary

    click.echo("\n=== Model Evaluation ===")
    click.echo(format_metrics_summary(metrics))


def build_training_options(cfg: Config, overrides: Dict[str, Optional[Any]]) -> Any:
    """TrainingOptions from the [training]/[split] config, with CLI overrides applied."""
    from wasteml.adapters.torchvision import TrainingOptions

    values = {
        "epochs": cfg.get("training", "epochs", 10),
        "batch_size": cfg.get("training", "batch_size", 10),
        "learning_rate": cfg.get("training", "learning_rate", 0.01),
        "reuse_train_bottleneck": cfg.get("training", "reuse_train_bottleneck", True),
        "reuse_validation_bottleneck": cfg.get("training", "reuse_validation_bottleneck", True),
        "seed": cfg.get("split", "seed", 1),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return TrainingOptions(**values)
    except ValueError as e:
        exit_with_error(str(e))


def predict_and_report(
    model: Any,
    folder: str,
    output_csv: str,
    cfg: Config,
    min_confidence: float,
    quiet: bool = False,
) -> None:
    """
    Predict every image in folder, write the CSV report and print the
    class distribution.

    With quiet=True a progress bar replaces the per-image lines.
    """
    svc = services.batch_prediction
    extensions = cfg.get("dataset", "extensions", [".jpg", ".png"])
    case_sensitive = cfg.get("dataset", "case_sensitive", True)

    def announce(progress: Any) -> None:
        if progress.completed == 0 and progress.current_file is None:
            click.echo(f"\nFound {progress.total} images for prediction:")

    def echo_prediction(prediction: Any) -> None:
        click.echo(f"Image: {prediction.image_name} -> Prediction: {prediction.predicted_label or ''}")

    if quiet:
        with ProgressBar(description="Predicting") as bar:

            def track(progress: Any) -> None:
                bar.update(completed=progress.completed, total=progress.total)

            svc.set_progress_callback(track)
            result = handle_result(
                svc.predict_folder(
                    folder,
                    model,
                    min_confidence=min_confidence,
                    extensions=extensions,
                    case_sensitive=case_sensitive,
                )
            )
    else:
        svc.set_progress_callback(announce)
        result = handle_result(
            svc.predict_folder(
                folder,
                model,
                on_prediction=echo_prediction,
                min_confidence=min_confidence,
                extensions=extensions,
                case_sensitive=case_sensitive,
            )
        )

    written = handle_result(svc.write_report(result, output_csv))
    click.echo(f"\nPredictions saved to {written}")

    from wasteml.core.report import format_class_distribution

    click.echo("\nPredicted class distribution:")
    for line in format_class_distribution(result.class_counts):
        click.echo(line)
