"""Shared fixtures for fileinclude tests."""

import logging
from pathlib import Path
from typing import Callable, Dict

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any logging configuration a test performed."""
    root_logger = logging.getLogger()
    level = root_logger.level
    handlers = root_logger.handlers[:]
    yield
    structlog.reset_defaults()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)


@pytest.fixture
def site(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """
    Write a tree of documents under a temporary directory.

    Usage:
        root = site({"a.tpl": "A", "partials/b.tpl": "B"})
    """
    def write(files: Dict[str, str]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return write
