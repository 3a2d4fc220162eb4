"""Pytest configuration and shared fixtures for PocketLedger tests.

This module provides database fixtures and test data factories for testing
the ledger rules, repositories and services against a throwaway SQLite file
without touching a real data directory.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import pytest

from pocketledger.config import TestingConfig
from pocketledger.domain.ledger import BucketType, CategoryType, TransactionType
from pocketledger.domain.records import BucketRecord, CategoryRecord, UserRecord
from pocketledger.infra.database import create_db_engine, create_session_factory, init_database
from pocketledger.logging_config import ROOT_LOGGER_NAME
from pocketledger.services.buckets import create_bucket
from pocketledger.services.categories import create_category, list_categories
from pocketledger.services.transactions import TransactionView, create_transaction
from pocketledger.services.users import register_user

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def config(tmp_path) -> TestingConfig:
    """Configuration pointing at a per-test data directory."""

    return TestingConfig(tmp_path / "instance")


@pytest.fixture(scope="function")
def db_engine(config):
    """Create an isolated file-backed SQLite database for each test.

    A file (not ``:memory:``) so that several threads can open their own
    connections to the same database.

    Yields:
        Engine: engine with the schema created
    """
    engine = create_db_engine(config)
    init_database(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory whose sessions commit on success and roll back on error."""

    return create_session_factory(db_engine)


@pytest.fixture(autouse=True)
def _reset_ledger_logging():
    """Drop handlers a test installed so later tests do not write to closed streams."""

    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(session_factory):
    """Factory for registering accounts (system categories included)."""

    counter = {"n": 0}

    def _create_user(email: str | None = None, password: str = "correct-horse") -> UserRecord:
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return register_user(email=email, password=password, session_factory=session_factory)

    return _create_user


@pytest.fixture
def user(user_factory) -> UserRecord:
    """Default account scoping test data."""

    return user_factory("tester@example.com")


@pytest.fixture
def other_user(user_factory) -> UserRecord:
    """Second account used to check ownership scoping."""

    return user_factory("intruder@example.com")


@pytest.fixture
def category_factory(session_factory, user):
    """Factory for creating user categories.

    Returns:
        Callable: Function that creates and persists categories via the service
    """

    def _create_category(
        name: str = "Test Category",
        category_type: CategoryType = CategoryType.EXPENSE,
        color: str | None = "#FF5733",
        owner: UserRecord | None = None,
    ) -> CategoryRecord:
        owner = owner or user
        return create_category(
            user_id=owner.id,
            name=name,
            type=category_type,
            color=color,
            session_factory=session_factory,
        )

    return _create_category


@pytest.fixture
def system_category(session_factory, user):
    """Look up one of the user's seeded system categories by name."""

    def _find(name: str) -> CategoryRecord:
        for category in list_categories(user_id=user.id, session_factory=session_factory):
            if category.name == name:
                return category
        raise LookupError(name)

    return _find


@pytest.fixture
def bucket_factory(session_factory, user):
    """Factory for creating buckets; returns the stored record."""

    def _create_bucket(
        name: str = "Emergency Fund",
        bucket_type: BucketType = BucketType.SAVINGS_GOAL,
        target_amount: Decimal | None = None,
        owner: UserRecord | None = None,
    ) -> BucketRecord:
        owner = owner or user
        view = create_bucket(
            user_id=owner.id,
            name=name,
            type=bucket_type,
            target_amount=target_amount,
            session_factory=session_factory,
        )
        return view.bucket

    return _create_bucket


@pytest.fixture
def transaction_factory(session_factory, user):
    """Factory for recording transactions through the create service.

    Returns:
        Callable: Function that validates and persists a transaction
    """

    def _create_transaction(
        txn_type: TransactionType,
        amount: str | Decimal,
        *,
        category_id: int | None = None,
        bucket_id: int | None = None,
        note: str | None = None,
        transaction_date: date | None = None,
        owner: UserRecord | None = None,
    ) -> TransactionView:
        owner = owner or user
        return create_transaction(
            user_id=owner.id,
            type=txn_type,
            amount=Decimal(amount),
            transaction_date=transaction_date or date.today(),
            category_id=category_id,
            bucket_id=bucket_id,
            note=note,
            session_factory=session_factory,
        )

    return _create_transaction
