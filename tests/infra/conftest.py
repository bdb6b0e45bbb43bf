"""
Shared fixtures for infra tests.

All tests use real filesystem operations with temporary directories.
No mocking - we test actual behavior.
"""

import pytest
from PIL import Image


@pytest.fixture
def tmp_storage(tmp_path):
    """Create a temporary repository storage root."""
    storage = tmp_path / "pagetext"
    storage.mkdir()
    return storage


@pytest.fixture
def object_storage(repository):
    """An ingested object with no datastreams."""
    return repository.ingest_object("test:42", label="Test Page")


@pytest.fixture
def sample_file(tmp_path):
    """A small real PNG to use as datastream content."""
    path = tmp_path / "sample.png"
    Image.new('L', (40, 40), color='white').save(path)
    return path


@pytest.fixture
def log_dir(tmp_path):
    """Create a temp directory for logs."""
    log_path = tmp_path / "logs"
    log_path.mkdir()
    return log_path
