"""Tests for the SQLModel repositories and the unit-of-work scope."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.ledger import CategoryType, TransactionType
from pocketledger.domain.records import CategoryRecord, TransactionRecord
from pocketledger.domain.repositories import TransactionFilters
from pocketledger.infra.unit_of_work import unit_of_work


def test_unit_of_work_rolls_back_on_error(session_factory, user):
    with pytest.raises(RuntimeError):
        with unit_of_work(session_factory) as uow:
            uow.categories.create(
                CategoryRecord.build(user_id=user.id, name="Ghost", type=CategoryType.EXPENSE).unwrap()
            )
            raise RuntimeError("boom")

    with unit_of_work(session_factory) as uow:
        assert not uow.categories.exists_by_name_and_type("Ghost", CategoryType.EXPENSE, user_id=user.id)


def test_calculate_balance_aggregates_by_type(session_factory, user, bucket_factory):
    bucket = bucket_factory()
    rows = [
        (TransactionType.INVESTMENT, "100.10"),
        (TransactionType.INVESTMENT, "0.20"),
        (TransactionType.WITHDRAWAL, "50.05"),
        (TransactionType.GOAL_COMPLETED, "10.00"),
    ]
    with unit_of_work(session_factory) as uow:
        for txn_type, amount in rows:
            uow.transactions.create(
                TransactionRecord.build(
                    user_id=user.id,
                    type=txn_type,
                    amount=Decimal(amount),
                    transaction_date=date(2024, 1, 1),
                    bucket_id=bucket.id,
                ).unwrap()
            )

    with unit_of_work(session_factory) as uow:
        assert uow.buckets.calculate_balance(bucket.id) == Decimal("40.25")
        assert uow.buckets.calculate_balance(999_999) == Decimal("0.00")


def test_search_term_is_literal(session_factory, user, system_category, transaction_factory):
    food = system_category("Food")
    transaction_factory(TransactionType.EXPENSE, "1.00", category_id=food.id, note="100% juice")
    transaction_factory(TransactionType.EXPENSE, "1.00", category_id=food.id, note="1000 grams")

    with unit_of_work(session_factory) as uow:
        found = uow.transactions.search(TransactionFilters(search_term="100%"), user_id=user.id)
        assert [t.note for t in found] == ["100% juice"]
        assert uow.transactions.count(TransactionFilters(search_term="100%"), user_id=user.id) == 1


def test_lock_is_scoped_to_owner(session_factory, user, other_user, bucket_factory):
    bucket = bucket_factory()

    with unit_of_work(session_factory) as uow:
        assert uow.buckets.lock(bucket.id, user_id=user.id).name == bucket.name
        assert uow.buckets.lock(bucket.id, user_id=other_user.id) is None
