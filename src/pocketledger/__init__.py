"""PocketLedger personal finance ledger package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestingConfig
from .infra.database import bootstrap_database

__all__ = ["BaseConfig", "DevConfig", "TestingConfig", "bootstrap_database"]
