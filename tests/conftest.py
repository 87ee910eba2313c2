"""Test configuration for the shakenc package."""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host SHAKENC_* variables out of the tests."""
    monkeypatch.delenv("SHAKENC_BUFFER_MIB", raising=False)
    monkeypatch.delenv("SHAKENC_DIGEST_SIZE", raising=False)
    monkeypatch.delenv("SHAKENC_LOG_LEVEL", raising=False)


@pytest.fixture
def sample_key():
    """Provide a sample key for testing."""
    return b"correct horse battery staple"


@pytest.fixture
def sample_data():
    """Provide a few KiB of data that is not a multiple of common buffer sizes."""
    return os.urandom(5000)


@pytest.fixture
def write_file(tmp_path):
    """Write ``data`` to a file under ``tmp_path`` and return its path."""

    def _write(name: str, data: bytes):
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
