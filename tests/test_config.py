"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from pocketledger.config import BaseConfig, TestingConfig


def test_defaults_use_sqlite_in_data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("POCKETLEDGER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("POCKETLEDGER_DATABASE_URL", raising=False)
    monkeypatch.delenv("POCKETLEDGER_SQLITE_BUSY_TIMEOUT", raising=False)
    monkeypatch.delenv("POCKETLEDGER_DEFAULT_CURRENCY", raising=False)

    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.exists()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'pocketledger.db'}"
    assert config.is_sqlite
    assert config.SQLITE_BUSY_TIMEOUT == 30.0
    assert config.DEFAULT_CURRENCY == "LKR"
    assert config.sqlalchemy_engine_options() == {
        "connect_args": {"check_same_thread": False, "timeout": 30.0}
    }


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("POCKETLEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("POCKETLEDGER_DEV_MODE", "false")
    monkeypatch.setenv("POCKETLEDGER_LOG_LEVEL", "debug")
    monkeypatch.setenv("POCKETLEDGER_SQLITE_BUSY_TIMEOUT", "5")
    monkeypatch.setenv("POCKETLEDGER_DEFAULT_CURRENCY", " USD ")
    monkeypatch.setenv("POCKETLEDGER_DATABASE_URL", "postgresql://ledger@localhost/ledger")

    config = BaseConfig()

    assert config.DEV_MODE is False
    assert config.LOG_LEVEL == "DEBUG"
    assert config.SQLITE_BUSY_TIMEOUT == 5.0
    assert config.DEFAULT_CURRENCY == "USD"
    assert not config.is_sqlite
    assert config.sqlalchemy_engine_options() == {"pool_pre_ping": True}


def test_bad_busy_timeout_is_reported(monkeypatch, tmp_path):
    monkeypatch.setenv("POCKETLEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("POCKETLEDGER_SQLITE_BUSY_TIMEOUT", "soon")

    with pytest.raises(ValueError, match="POCKETLEDGER_SQLITE_BUSY_TIMEOUT"):
        BaseConfig()


def test_testing_config_ignores_environment_paths(monkeypatch, tmp_path):
    monkeypatch.setenv("POCKETLEDGER_DATA_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("POCKETLEDGER_DATABASE_URL", "sqlite:///should-not-be-used.db")

    config = TestingConfig(tmp_path / "tests")

    assert config.DATA_DIR == Path(tmp_path / "tests").resolve()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'pocketledger.db'}"
    assert config.TESTING is True
