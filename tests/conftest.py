# tests/conftest.py
"""
Global pytest fixtures for wasteml tests.

Images are tiny solid-color files generated with Pillow: "glass" images are
red, "plastic" images are blue, so a classifier has an easy signal to learn.
"""

from pathlib import Path

import pytest

from tests.mocks.images import BLUE, RED, make_image


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the global configuration and the CLI service factory between tests."""
    from wasteml.cli.service_helpers import reset_factory
    from wasteml.core.config import reset_config

    reset_config()
    reset_factory()
    yield
    reset_config()
    reset_factory()


@pytest.fixture
def waste_dataset(tmp_path) -> Path:
    """
    A 12-image, two-class dataset:

        WasteDataset/
            glass/    glass_0.png .. glass_4.png, bottles/glass_5.jpg
            plastic/  plastic_0.jpg .. plastic_5.jpg
            notes.txt (ignored: not in a class directory)
            glass/readme.txt (ignored: wrong extension)
    """
    root = tmp_path / "WasteDataset"
    for i in range(5):
        make_image(root / "glass" / f"glass_{i}.png", RED)
    make_image(root / "glass" / "bottles" / "glass_5.jpg", RED)
    for i in range(6):
        make_image(root / "plastic" / f"plastic_{i}.jpg", BLUE)
    (root / "notes.txt").write_text("not an image")
    (root / "glass" / "readme.txt").write_text("not an image")
    return root


@pytest.fixture
def prediction_folder(tmp_path) -> Path:
    """A folder of three unlabeled images plus one non-image file."""
    folder = tmp_path / "TestImages"
    make_image(folder / "a.jpg", BLUE)
    make_image(folder / "b.png", RED)
    make_image(folder / "nested" / "c.png", RED)
    (folder / "ignore.gif").write_bytes(b"GIF89a")
    return folder
