"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from posengine.infrastructure.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("POS_BACKEND", "POS_RECEIPT_WIDTH", "POS_RECEIPT_COPIES", "POS_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.backend == "local"
        assert settings.receipt_width == 42
        assert settings.timeout_seconds == 15.0
        assert settings.cash_drawer_device is None

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("POS_BACKEND", "http")
        monkeypatch.setenv("POS_RECEIPT_WIDTH", "32")
        monkeypatch.setenv("POS_DATA_DIR", str(tmp_path))

        settings = Settings(_env_file=None)

        assert settings.backend == "http"
        assert settings.receipt_width == 32
        assert settings.data_dir == Path(tmp_path)

    def test_unsupported_paper_width(self, monkeypatch):
        monkeypatch.setenv("POS_RECEIPT_WIDTH", "40")
        with pytest.raises(ValidationError, match="32"):
            Settings(_env_file=None)

    def test_copies_at_least_one(self, monkeypatch):
        monkeypatch.setenv("POS_RECEIPT_COPIES", "0")
        assert Settings(_env_file=None).receipt_copies == 1
