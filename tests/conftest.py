"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- HTTP clients
- Mock settings/configuration
- Sample MHTML archives
- Temporary files
"""

import os
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mhtml_stream.api.app import app
from mhtml_stream.config import Settings
from .fixtures.mhtml import SAMPLE_ARCHIVES


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_settings() -> Settings:
    """
    Create mock settings for testing with safe defaults.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        max_upload_size_mb=1,
        read_chunk_size=16,
        log_level="INFO",
        log_json=False,  # Easier to read in tests
    )


@pytest.fixture
def wikipedia_mhtml() -> bytes:
    """
    Get the Wikipedia multipart/mixed example with a base64 part.

    Returns:
        CRLF bytes of the archive
    """
    return SAMPLE_ARCHIVES["wikipedia"]


@pytest.fixture
def saved_page_mhtml() -> bytes:
    """
    Get a Blink-style saved page with quoted-printable, base64 and 7bit parts.

    Returns:
        CRLF bytes of the archive
    """
    return SAMPLE_ARCHIVES["saved_page"]


@pytest.fixture
def missing_terminus_mhtml() -> bytes:
    """
    Get an archive whose last part isn't closed by the terminus boundary.

    Returns:
        CRLF bytes of the archive
    """
    return SAMPLE_ARCHIVES["missing_terminus"]


@pytest.fixture
def tmp_mhtml_file(tmp_path) -> Generator[str, None, None]:
    """
    Create temporary .mhtml file for file-based tests.

    Args:
        tmp_path: pytest's temporary directory fixture

    Yields:
        Path to temporary .mhtml file
    """
    mhtml_path = tmp_path / "page.mhtml"
    mhtml_path.write_bytes(SAMPLE_ARCHIVES["saved_page"])
    yield str(mhtml_path)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables before each test.

    This prevents test pollution from env var changes.
    """
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """
    Configure pytest with custom markers and settings.
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (API, end-to-end)"
    )
