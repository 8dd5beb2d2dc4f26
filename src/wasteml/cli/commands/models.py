"""Model training, evaluation and prediction commands.

Examples:
    wasteml models train WasteDataset --model-path model.zip --epochs 10
    wasteml models evaluate WasteDataset --model-path model.zip --output eval.json
    wasteml models predict TestImages --model-path model.zip --output Predictions.csv
    wasteml models info model.zip
"""

from typing import Optional

import click

from wasteml.cli.options import split_options, training_options


@click.group()
def models() -> None:
    """Train, evaluate and apply image classifiers."""
    pass


@models.command("architectures")
def models_architectures() -> None:
    """List supported backbone architectures."""
    from wasteml.cli.service_helpers import services

    result = services.classifier.list_architectures()
    default = result.metadata.get("default")
    for name in result.data:
        click.echo(f"{name} (default)" if name == default else name)


@models.command("train")
@click.argument("root", required=False)
@click.option("--model-path", default=None, help="Model artifact to write")
@training_options
def models_train(
    root: Optional[str],
    model_path: Optional[str],
    architecture: Optional[str],
    pretrained: Optional[bool],
    image_size: Optional[int],
    epochs: Optional[int],
    batch_size: Optional[int],
    learning_rate: Optional[float],
    test_fraction: Optional[float],
    seed: Optional[int],
) -> None:
    """Train on ROOT, evaluate on the held-out split and save the model.

    Example:
        wasteml models train WasteDataset --architecture resnet50 --epochs 5
    """
    from wasteml.cli.output import build_training_options, echo_epoch, echo_evaluation
    from wasteml.cli.service_helpers import handle_result, services
    from wasteml.core.config import get_config
    from wasteml.core.datasets import dataset_schema

    cfg = get_config()
    root = root or cfg.get("dataset", "root", "WasteDataset")
    model_path = model_path or cfg.get("model", "path", "WasteClassificationModel.zip")
    seed = seed if seed is not None else cfg.get("split", "seed", 1)

    split = handle_result(
        services.dataset.split(
            root,
            test_fraction=test_fraction or cfg.get("split", "test_fraction", 0.2),
            seed=seed,
            extensions=cfg.get("dataset", "extensions", [".jpg", ".png"]),
            case_sensitive=cfg.get("dataset", "case_sensitive", True),
        )
    ).split
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


@models.command("evaluate")
@click.argument("root", required=False)
@click.option("--model-path", default=None, help="Saved model artifact")
@click.option("--output", "-o", default=None, help="Also save the full report to this file")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "csv", "txt"]),
    default="json",
    help="Report format for --output",
)
@click.option("--all-images", is_flag=True, help="Evaluate on every image instead of the test split")
@split_options
def models_evaluate(
    root: Optional[str],
    model_path: Optional[str],
    output: Optional[str],
    output_format: str,
    all_images: bool,
    test_fraction: Optional[float],
    seed: Optional[int],
) -> None:
    """Evaluate a saved model on the reproducible test split of ROOT.

    Example:
        wasteml models evaluate WasteDataset --model-path model.zip -o eval.txt --format txt
    """
    from wasteml.cli.output import echo_evaluation
    from wasteml.cli.progress import print_success
    from wasteml.cli.service_helpers import exit_with_error, handle_result, services
    from wasteml.core.config import get_config
    from wasteml.core.evaluate import format_metrics_report, save_evaluation_results

    cfg = get_config()
    root = root or cfg.get("dataset", "root", "WasteDataset")
    model_path = model_path or cfg.get("model", "path", "WasteClassificationModel.zip")

    split = handle_result(
        services.dataset.split(
            root,
            test_fraction=test_fraction or cfg.get("split", "test_fraction", 0.2),
            seed=seed if seed is not None else cfg.get("split", "seed", 1),
            extensions=cfg.get("dataset", "extensions", [".jpg", ".png"]),
            case_sensitive=cfg.get("dataset", "case_sensitive", True),
        )
    ).split
    records = split.train + split.test if all_images else split.test

    classifier = services.classifier
    handle_result(classifier.load_model(model_path))
    metrics = handle_result(classifier.evaluate(records))

    echo_evaluation(metrics)
    click.echo()
    click.echo(format_metrics_report(metrics))

    if output:
        try:
            saved = save_evaluation_results(metrics, output, format=output_format)
        except OSError as e:
            exit_with_error(f"Cannot write {output}: {e}")
        print_success(f"Evaluation saved to {saved}")


@models.command("predict")
@click.argument("folder", required=False)
@click.option("--model-path", default=None, help="Saved model artifact")
@click.option("--output", "-o", default=None, help="Prediction CSV to write")
@click.option(
    "--min-confidence",
    type=float,
    default=None,
    help="Predictions scoring below this are reported with an empty label",
)
@click.option("--quiet", "-q", is_flag=True, help="Show a progress bar instead of per-image lines")
def models_predict(
    folder: Optional[str],
    model_path: Optional[str],
    output: Optional[str],
    min_confidence: Optional[float],
    quiet: bool,
) -> None:
    """Classify every image in FOLDER with a saved model.

    Example:
        wasteml models predict TestImages --model-path model.zip --output Predictions.csv
    """
    from wasteml.cli.output import predict_and_report
    from wasteml.cli.service_helpers import handle_result, services
    from wasteml.core.config import get_config

    cfg = get_config()
    folder = folder or cfg.get("predict", "folder", "TestImages")
    model_path = model_path or cfg.get("model", "path", "WasteClassificationModel.zip")
    output = output or cfg.get("predict", "output_csv", "Predictions.csv")
    if min_confidence is None:
        min_confidence = cfg.get("predict", "min_confidence", 0.0)

    classifier = services.classifier
    handle_result(classifier.load_model(model_path))
    predict_and_report(
        classifier.adapter, folder, output, cfg, min_confidence=min_confidence, quiet=quiet
    )


@models.command("info")
@click.argument("model_path")
def models_info(model_path: str) -> None:
    """Show the schema stored in a saved model."""
    from wasteml.cli.progress import print_summary
    from wasteml.cli.service_helpers import handle_result, services

    info = handle_result(services.classifier.get_model_info(model_path))
    schema = info.schema
    dataset = schema.get("dataset_schema") or {}
    print_summary(
        f"Model: {info.path}",
        {
            "Architecture": schema.get("architecture"),
            "Image size": schema.get("image_size"),
            "Feature dim": schema.get("feature_dim"),
            "Classes": ", ".join(schema.get("classes", [])),
            "Training images": dataset.get("num_rows", "unknown"),
            "File size": f"{info.size_bytes / (1024 * 1024):.1f} MB",
            "wasteml version": schema.get("wasteml_version"),
        },
    )
