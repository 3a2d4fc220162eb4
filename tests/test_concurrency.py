"""Concurrent withdrawals against one bucket must not overdraw it."""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal

from pocketledger.domain.ledger import TransactionType
from pocketledger.errors import BusinessRuleViolation
from pocketledger.services.buckets import bucket_balance
from pocketledger.services.transactions import create_transaction, update_transaction


def _race(*calls) -> list[str]:
    """Start every call at once; return sorted "ok"/"rejected" outcomes."""

    barrier = threading.Barrier(len(calls))
    outcomes: list[str] = []
    unexpected: list[BaseException] = []
    lock = threading.Lock()

    def run(call) -> None:
        barrier.wait()
        try:
            call()
        except BusinessRuleViolation:
            with lock:
                outcomes.append("rejected")
        except BaseException as exc:  # surfaced below
            with lock:
                unexpected.append(exc)
        else:
            with lock:
                outcomes.append("ok")

    threads = [threading.Thread(target=run, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert not unexpected, unexpected
    return sorted(outcomes)


def test_two_concurrent_withdrawals_only_one_succeeds(
    session_factory, user, bucket_factory, transaction_factory
):
    bucket = bucket_factory("Shared")
    transaction_factory(TransactionType.INVESTMENT, "100.00", bucket_id=bucket.id)

    def withdraw() -> None:
        create_transaction(
            user_id=user.id,
            type=TransactionType.WITHDRAWAL,
            amount=Decimal("100.00"),
            transaction_date=date.today(),
            bucket_id=bucket.id,
            session_factory=session_factory,
        )

    assert _race(withdraw, withdraw) == ["ok", "rejected"]
    assert bucket_balance(
        user_id=user.id, bucket_id=bucket.id, session_factory=session_factory
    ) == Decimal("0.00")


def test_two_concurrent_withdrawal_increases_only_one_succeeds(
    session_factory, user, bucket_factory, transaction_factory
):
    bucket = bucket_factory("Shared")
    transaction_factory(TransactionType.INVESTMENT, "100.00", bucket_id=bucket.id)
    first = transaction_factory(TransactionType.WITHDRAWAL, "10.00", bucket_id=bucket.id)
    second = transaction_factory(TransactionType.WITHDRAWAL, "10.00", bucket_id=bucket.id)

    def raise_to_sixty(transaction_id: int):
        def call() -> None:
            update_transaction(
                user_id=user.id,
                transaction_id=transaction_id,
                amount=Decimal("60.00"),
                transaction_date=date.today(),
                bucket_id=bucket.id,
                session_factory=session_factory,
            )

        return call

    assert _race(raise_to_sixty(first.id), raise_to_sixty(second.id)) == ["ok", "rejected"]
    assert bucket_balance(
        user_id=user.id, bucket_id=bucket.id, session_factory=session_factory
    ) == Decimal("30.00")
