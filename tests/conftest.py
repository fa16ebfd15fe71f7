"""Shared fixtures."""

from __future__ import annotations

import os

import pytest

from stripe_facility.core.config import clear_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test without STRIPE_FACILITY_* variables or a .env file."""
    for name in list(os.environ):
        if name.startswith("STRIPE_FACILITY_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    clear_settings()
    yield
    clear_settings()
