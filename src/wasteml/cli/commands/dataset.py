"""Dataset inspection commands."""

from typing import Optional

import click

from wasteml.cli.options import split_options


@click.group()
def dataset() -> None:
    """Inspect directory-per-class image datasets."""
    pass


def _scan_settings() -> dict:
    from wasteml.core.config import get_config

    cfg = get_config()
    return {
        "extensions": cfg.get("dataset", "extensions", [".jpg", ".png"]),
        "case_sensitive": cfg.get("dataset", "case_sensitive", True),
    }


@dataset.command("scan")
@click.argument("root", required=False)
@click.option("--output", "-o", default=None, help="Write an ImagePath,Label manifest CSV")
def dataset_scan(root: Optional[str], output: Optional[str]) -> None:
    """Count images per class under ROOT (default: dataset.root from config).

    Example:
        wasteml dataset scan WasteDataset --output manifest.csv
    """
    from wasteml.cli.progress import print_success, print_table
    from wasteml.cli.service_helpers import handle_result, services
    from wasteml.core.config import get_config

    root = root or get_config().get("dataset", "root", "WasteDataset")
    scan = handle_result(services.dataset.scan(root, manifest_path=output, **_scan_settings()))

    print_table(
        f"{root}: {scan.total_images} images",
        ["Label", "Images"],
        [[label, count] for label, count in scan.label_counts.items()],
    )
    if scan.manifest_path:
        print_success(f"Manifest written to {scan.manifest_path}")


@dataset.command("split")
@click.argument("root", required=False)
@split_options
def dataset_split(root: Optional[str], test_fraction: Optional[float], seed: Optional[int]) -> None:
    """Show the train/test split that training would use.

    Example:
        wasteml dataset split WasteDataset --test-fraction 0.2 --seed 1
    """
    from wasteml.cli.progress import print_table
    from wasteml.cli.service_helpers import handle_result, services
    from wasteml.core.config import get_config

    cfg = get_config()
    root = root or cfg.get("dataset", "root", "WasteDataset")
    result = handle_result(
        services.dataset.split(
            root,
            test_fraction=test_fraction or cfg.get("split", "test_fraction", 0.2),
            seed=seed if seed is not None else cfg.get("split", "seed", 1),
            **_scan_settings(),
        )
    )

    labels = list(dict.fromkeys(list(result.train_counts) + list(result.test_counts)))
    rows = [[label, result.train_counts.get(label, 0), result.test_counts.get(label, 0)] for label in labels]
    rows.append(["total", len(result.split.train), len(result.split.test)])
    print_table(
        f"Split of {root} (test fraction {result.split.test_fraction}, seed {result.split.seed})",
        ["Label", "Train", "Test"],
        rows,
    )
