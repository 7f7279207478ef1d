"""Pytest configuration and fixtures."""

import base64
import io
import os
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from markmail.config.settings import get_settings

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


def png_bytes(width: int, height: int, color: str = "red") -> bytes:
    """Encode a solid-color PNG of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_uri(width: int = 1, height: int = 1) -> str:
    """A base64 data URI holding a small PNG."""
    return "data:image/png;base64," + base64.b64encode(png_bytes(width, height)).decode("ascii")


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """A temporary directory for tests."""
    return tmp_path


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path_factory, monkeypatch):
    """Keep tests away from markmail.yaml files and MARKMAIL_* variables."""
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    for name in list(os.environ):
        if name.startswith("MARKMAIL_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def data_uri() -> Callable[..., str]:
    """Factory for base64 PNG data URIs."""
    return png_data_uri


@pytest.fixture
def make_image(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing PNG/JPEG files into the temp directory."""

    def _make(name: str, width: int, height: int, fmt: str = "PNG") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (width, height), color="blue").save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def write_html(temp_dir: Path) -> Callable[[str, str], Path]:
    """Factory writing an HTML document whose body is ``body``."""

    def _write(body: str, name: str = "page.html") -> Path:
        path = temp_dir / name
        path.write_text(
            f"<html><head><title>Test</title></head><body>{body}</body></html>",
            encoding="utf-8",
        )
        return path

    return _write
