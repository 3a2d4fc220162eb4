"""Tests for the validating record factories."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.ledger import BucketStatus, BucketType, CategoryType, TransactionType
from pocketledger.domain.records import (
    BucketRecord,
    CategoryRecord,
    Err,
    Ok,
    TransactionRecord,
    UserRecord,
    money_error,
)


def _txn(**overrides):
    fields = dict(
        user_id=1,
        type=TransactionType.EXPENSE,
        amount=Decimal("12.50"),
        transaction_date=date(2024, 3, 1),
        category_id=3,
    )
    fields.update(overrides)
    return TransactionRecord.build(**fields)


def test_money_error_rules():
    assert money_error(Decimal("0.01")) is None
    assert money_error(5) is None
    assert money_error(1.5) == "amount must be a Decimal"
    assert money_error(Decimal("0")) == "amount must be positive"
    assert money_error(Decimal("-1.00")) == "amount must be positive"
    assert money_error(Decimal("1.001")) == "amount must have at most 2 decimal places"
    assert money_error(Decimal("NaN")) == "amount must be a finite number"
    assert money_error(Decimal("9999999999999.99")) is None
    assert "integer digits" in money_error(Decimal("10000000000000.00"))


def test_transaction_build_ok():
    result = _txn(note="Lunch")
    assert isinstance(result, Ok)
    record = result.unwrap()
    assert record.amount == Decimal("12.50")
    assert record.usable_amount_effect == Decimal("-12.50")
    assert record.bucket_balance_effect == Decimal("0.00")
    assert record.has_note
    assert record.can_be_edited and record.can_be_deleted


def test_transaction_records_are_frozen():
    record = _txn().unwrap()
    with pytest.raises(FrozenInstanceError):
        record.amount = Decimal("1.00")  # type: ignore[misc]


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"category_id": None}, "EXPENSE transactions require a category_id"),
        ({"bucket_id": 9}, "EXPENSE transactions cannot have a bucket_id"),
        (
            {"type": TransactionType.INVESTMENT, "category_id": None},
            "INVESTMENT transactions require a bucket_id",
        ),
        (
            {"type": TransactionType.WITHDRAWAL, "bucket_id": 2},
            "WITHDRAWAL transactions cannot have a category_id",
        ),
        ({"amount": Decimal("0")}, "amount must be positive"),
        ({"note": "x" * 501}, "note exceeds maximum length of 500"),
        ({"user_id": None}, "user_id must not be null"),
    ],
)
def test_transaction_build_errors(overrides, reason):
    result = _txn(**overrides)
    assert isinstance(result, Err)
    assert result.reason == reason
    with pytest.raises(ValueError):
        result.unwrap()


def test_goal_completed_record_is_system_generated():
    record = _txn(
        type=TransactionType.GOAL_COMPLETED, category_id=None, bucket_id=4
    ).unwrap()
    assert record.is_system_generated
    assert not record.can_be_edited
    assert record.usable_amount_effect == Decimal("0.00")
    assert record.bucket_balance_effect == Decimal("-12.50")


def test_bucket_target_only_for_savings_goal():
    goal = BucketRecord.build(
        user_id=1, name=" Trip ", type=BucketType.SAVINGS_GOAL, target_amount=Decimal("1500")
    ).unwrap()
    assert goal.name == "Trip"
    assert goal.target_amount == Decimal("1500.00")
    assert goal.status is BucketStatus.ACTIVE
    assert goal.can_mark_as_spent

    asset = BucketRecord.build(
        user_id=1, name="Gold", type=BucketType.PERPETUAL_ASSET, target_amount=Decimal("10")
    )
    assert isinstance(asset, Err)
    assert "SAVINGS_GOAL" in asset.reason

    negative = BucketRecord.build(
        user_id=1, name="Trip", type=BucketType.SAVINGS_GOAL, target_amount=Decimal("-5")
    )
    assert isinstance(negative, Err)


def test_archived_bucket_flags():
    bucket = BucketRecord.build(
        user_id=1, name="Old", type=BucketType.SAVINGS_GOAL, status=BucketStatus.ARCHIVED
    ).unwrap()
    assert bucket.is_archived
    assert not bucket.can_receive_transactions
    assert not bucket.can_mark_as_spent


def test_category_build_trims_and_checks_lengths():
    record = CategoryRecord.build(user_id=1, name="  Food  ", type="EXPENSE").unwrap()
    assert record.name == "Food"
    assert record.type is CategoryType.EXPENSE
    assert record.can_be_used_with(TransactionType.EXPENSE)
    assert not record.can_be_used_with(TransactionType.INCOME)

    assert isinstance(CategoryRecord.build(user_id=1, name="   ", type="EXPENSE"), Err)
    assert isinstance(CategoryRecord.build(user_id=1, name="x" * 101, type="EXPENSE"), Err)
    assert isinstance(CategoryRecord.build(user_id=1, name="Food", type="TRANSFER"), Err)
    assert isinstance(
        CategoryRecord.build(user_id=1, name="Food", type="EXPENSE", color="#" * 21), Err
    )


def test_user_email_is_normalized():
    record = UserRecord.build(email="  Someone@Example.COM ", password_hash=None).unwrap()
    assert record.email == "someone@example.com"
    assert record.currency_symbol == "LKR"
    assert record.has_email("SOMEONE@example.com")
    assert not record.is_persisted
    assert isinstance(UserRecord.build(email=" ", password_hash=None), Err)
