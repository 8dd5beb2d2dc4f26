"""The end-to-end pipeline: scan, split, train, evaluate, save, predict, report."""

from typing import Optional

import click

from wasteml.cli.options import training_options


@click.command()
@click.option("--dataset", "dataset_root", default=None, help="Dataset root (default: WasteDataset)")
@click.option("--test-images", default=None, help="Folder of images to predict (default: TestImages)")
@click.option(
    "--model-path", default=None, help="Model artifact to write (default: WasteClassificationModel.zip)"
)
@click.option("--output", "-o", default=None, help="Prediction CSV (default: Predictions.csv)")
@click.option(
    "--min-confidence",
    type=float,
    default=None,
    help="Predictions scoring below this are reported with an empty label",
)
@click.option("--quiet", "-q", is_flag=True, help="Show a progress bar instead of per-image lines")
@training_options
def run(
    dataset_root: Optional[str],
    test_images: Optional[str],
    model_path: Optional[str],
    output: Optional[str],
    min_confidence: Optional[float],
    quiet: bool,
    architecture: Optional[str],
    pretrained: Optional[bool],
    image_size: Optional[int],
    epochs: Optional[int],
    batch_size: Optional[int],
    learning_rate: Optional[float],
    test_fraction: Optional[float],
    seed: Optional[int],
) -> None:
    """Train on a labeled dataset, then classify a folder of new images.

    Every option falls back to the configuration file and then to the
    built-in defaults, which read ./WasteDataset and ./TestImages and write
    ./WasteClassificationModel.zip and ./Predictions.csv.

    Example:
        wasteml run
        wasteml run --dataset data/train --test-images data/new --epochs 5
    """
    from wasteml.cli.output import (
        build_training_options,
        echo_epoch,
        echo_evaluation,
        predict_and_report,
    )
    from wasteml.cli.service_helpers import handle_result, services
    from wasteml.core.config import get_config
    from wasteml.core.datasets import dataset_schema

    cfg = get_config()
    dataset_root = dataset_root or cfg.get("dataset", "root", "WasteDataset")
    test_images = test_images or cfg.get("predict", "folder", "TestImages")
    model_path = model_path or cfg.get("model", "path", "WasteClassificationModel.zip")
    output = output or cfg.get("predict", "output_csv", "Predictions.csv")
    if min_confidence is None:
        min_confidence = cfg.get("predict", "min_confidence", 0.0)
    seed = seed if seed is not None else cfg.get("split", "seed", 1)

    split_result = handle_result(
        services.dataset.split(
            dataset_root,
            test_fraction=test_fraction or cfg.get("split", "test_fraction", 0.2),
            seed=seed,
            extensions=cfg.get("dataset", "extensions", [".jpg", ".png"]),
            case_sensitive=cfg.get("dataset", "case_sensitive", True),
        )
    )
    split = split_result.split

    options = build_training_options(
        cfg,
        {"epochs": epochs, "batch_size": batch_size, "learning_rate": learning_rate, "seed": seed},
    )

    classifier = services.classifier
    handle_result(
        classifier.create_model(
            architecture=architecture or cfg.get("training", "architecture", "resnet101"),
            pretrained=pretrained if pretrained is not None else cfg.get("training", "pretrained", True),
            image_size=image_size or cfg.get("training", "image_size", 224),
        )
    )

    click.echo("Training model...")
    handle_result(classifier.train(split.train, split.test, options, metrics_callback=echo_epoch))

    echo_evaluation(handle_result(classifier.evaluate(split.test)))

    saved = handle_result(
        classifier.save_model(model_path, dataset_schema=dataset_schema(split.train + split.test))
    )
    click.echo(f"\nModel saved to {saved}")

    predict_and_report(
        classifier.adapter,
        test_images,
        output,
        cfg,
        min_confidence=min_confidence,
        quiet=quiet,
    )
