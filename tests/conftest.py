"""Root test configuration: keep host MACARONI_* settings out of the tests"""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove MACARONI_* env vars so the developer's shell cannot change test results."""
    for name in list(os.environ):
        if name.startswith("MACARONI_"):
            monkeypatch.delenv(name)
