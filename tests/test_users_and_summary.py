"""Tests for account services and the ledger summary."""

from __future__ import annotations

from decimal import Decimal

import pytest

from pocketledger.domain.ledger import TransactionType
from pocketledger.errors import AuthenticationFailed, DuplicateResource, NotFound, ValidationFailed
from pocketledger.services.buckets import mark_as_spent
from pocketledger.services.summary import ledger_summary, usable_amount
from pocketledger.services.users import (
    authenticate,
    get_user,
    register_user,
    update_currency_symbol,
)


def test_register_hashes_password_and_defaults_currency(session_factory):
    user = register_user(
        email="  New.Person@Example.com ", password="long-enough", session_factory=session_factory
    )

    assert user.id is not None
    assert user.email == "new.person@example.com"
    assert user.currency_symbol == "LKR"
    assert user.password_hash and user.password_hash != "long-enough"
    assert user.password_hash.startswith("$argon2")


def test_duplicate_email_is_case_insensitive(session_factory, user):
    with pytest.raises(DuplicateResource, match="already exists"):
        register_user(email="TESTER@example.com", password="another-pass", session_factory=session_factory)


def test_register_validates_input(session_factory):
    with pytest.raises(ValidationFailed) as excinfo:
        register_user(email="  ", password="short", session_factory=session_factory)

    assert set(excinfo.value.field_errors) == {"email", "password"}


def test_authenticate(session_factory, user):
    assert authenticate(
        email="tester@example.com", password="correct-horse", session_factory=session_factory
    ).id == user.id

    with pytest.raises(AuthenticationFailed, match="Invalid email or password"):
        authenticate(email="tester@example.com", password="wrong-horse", session_factory=session_factory)
    with pytest.raises(AuthenticationFailed, match="Invalid email or password"):
        authenticate(email="nobody@example.com", password="correct-horse", session_factory=session_factory)


def test_update_currency_symbol(session_factory, user):
    updated = update_currency_symbol(user_id=user.id, currency_symbol=" $ ", session_factory=session_factory)
    assert updated.currency_symbol == "$"
    assert get_user(user_id=user.id, session_factory=session_factory).currency_symbol == "$"

    with pytest.raises(ValidationFailed):
        update_currency_symbol(user_id=user.id, currency_symbol="   ", session_factory=session_factory)
    with pytest.raises(NotFound, match="User not found"):
        update_currency_symbol(user_id=999_999, currency_symbol="$", session_factory=session_factory)


def test_get_missing_user(session_factory):
    with pytest.raises(NotFound, match="^User not found$"):
        get_user(user_id=424242, session_factory=session_factory)


def test_ledger_summary(session_factory, user, other_user, system_category, bucket_factory, transaction_factory):
    salary = system_category("Salary")
    food = system_category("Food")
    goal = bucket_factory("Trip")
    asset = bucket_factory("Gold", "PERPETUAL_ASSET")

    transaction_factory(TransactionType.INCOME, "3000.00", category_id=salary.id)
    transaction_factory(TransactionType.EXPENSE, "450.25", category_id=food.id)
    transaction_factory(TransactionType.INVESTMENT, "500.00", bucket_id=goal.id)
    transaction_factory(TransactionType.INVESTMENT, "300.00", bucket_id=asset.id)
    transaction_factory(TransactionType.WITHDRAWAL, "100.00", bucket_id=asset.id)
    mark_as_spent(user_id=user.id, bucket_id=goal.id, session_factory=session_factory)

    summary = ledger_summary(user_id=user.id, session_factory=session_factory)

    assert summary.total_income == Decimal("3000.00")
    assert summary.total_expense == Decimal("450.25")
    assert summary.total_in_buckets == Decimal("200.00")
    assert summary.usable_amount == Decimal("1849.75")
    assert usable_amount(user_id=user.id, session_factory=session_factory) == summary.usable_amount

    empty = ledger_summary(user_id=other_user.id, session_factory=session_factory)
    assert empty.usable_amount == Decimal("0.00")
    assert empty.total_in_buckets == Decimal("0.00")
