"""Shared fixtures for service tests."""

import pytest

from tests.mocks.fake_classifier import FakeClassifier
from tests.mocks.mock_repository import MockFileRepository
from wasteml.repository import LocalFileRepository
from wasteml.services import ServiceFactory


@pytest.fixture
def mock_repository() -> MockFileRepository:
    """Create a mock file repository for testing."""
    return MockFileRepository()


@pytest.fixture
def factory() -> ServiceFactory:
    """Service factory backed by the real filesystem."""
    return ServiceFactory(file_repository=LocalFileRepository())


@pytest.fixture
def fake_adapter(mocker):
    """Replace ImageClassifierAdapter with FakeClassifier wherever services look it up."""
    return mocker.patch("wasteml.adapters.torchvision.ImageClassifierAdapter", FakeClassifier)
