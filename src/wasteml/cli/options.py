"""Reusable Click decorators for training command options.

Every option defaults to None so that an unset option falls back to the
loaded configuration.
"""

from typing import Callable

import click


def split_options(f: Callable) -> Callable:
    """Add --test-fraction and --seed."""
    f = click.option("--seed", type=int, default=None, help="Random seed for the train/test split")(f)
    f = click.option(
        "--test-fraction",
        type=float,
        default=None,
        help="Fraction of images held out for evaluation (default: 0.2)",
    )(f)
    return f


def training_options(f: Callable) -> Callable:
    """Add model and hyperparameter options.

    Adds:
    - --architecture, --pretrained/--no-pretrained, --image-size
    - --epochs, --batch-size, --learning-rate
    - --test-fraction, --seed
    """
    f = click.option("--learning-rate", type=float, default=None, help="SGD learning rate")(f)
    f = click.option("--batch-size", type=int, default=None, help="Training batch size")(f)
    f = click.option("--epochs", type=int, default=None, help="Number of training epochs")(f)
    f = click.option("--image-size", type=int, default=None, help="Input image side length")(f)
    f = click.option(
        "--pretrained/--no-pretrained",
        default=None,
        help="Start from ImageNet weights",
    )(f)
    f = click.option(
        "--architecture",
        default=None,
        help="Backbone architecture (see 'wasteml models architectures')",
    )(f)
    return split_options(f)
