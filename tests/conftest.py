"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally, and skip tests marked
`requires_tar` on machines without a tar binary.
"""
import shutil
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))
    config.addinivalue_line("markers", "requires_tar: test runs the system tar binary")


def pytest_collection_modifyitems(config, items):
    if shutil.which("tar") is not None:
        return
    skip = pytest.mark.skip(reason="tar not installed")
    for item in items:
        if "requires_tar" in item.keywords:
            item.add_marker(skip)
