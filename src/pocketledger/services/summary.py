"""Account-level totals derived from the transaction history."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..domain.ledger import ZERO, TransactionType, fold_type_totals, to_money
from ..infra.database import SessionFactory
from ..infra.unit_of_work import unit_of_work


@dataclass(frozen=True, slots=True)
class LedgerSummary:
    usable_amount: Decimal
    total_income: Decimal
    total_expense: Decimal
    total_in_buckets: Decimal


def usable_amount(*, user_id: int, session_factory: SessionFactory) -> Decimal:
    """Money not set aside in any bucket: income and withdrawals minus expenses and investments."""
    with unit_of_work(session_factory) as uow:
        return fold_type_totals(uow.transactions.totals_by_type(user_id=user_id), bucket=False)


def ledger_summary(*, user_id: int, session_factory: SessionFactory) -> LedgerSummary:
    with unit_of_work(session_factory) as uow:
        totals = uow.transactions.totals_by_type(user_id=user_id)
    return LedgerSummary(
        usable_amount=fold_type_totals(totals, bucket=False),
        total_income=to_money(totals.get(TransactionType.INCOME, ZERO)),
        total_expense=to_money(totals.get(TransactionType.EXPENSE, ZERO)),
        total_in_buckets=fold_type_totals(totals, bucket=True),
    )
