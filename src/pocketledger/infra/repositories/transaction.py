"""SQLModel implementation of Transaction repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...domain.ledger import TransactionType
from ...domain.records import TransactionRecord
from ...domain.repositories.transaction import TransactionFilters
from ...models.transaction import Transaction
from ...models.user import utcnow


def _to_record(row: Transaction) -> TransactionRecord:
    return TransactionRecord.build(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        amount=Decimal(str(row.amount)),
        transaction_date=row.transaction_date,
        category_id=row.category_id,
        bucket_id=row.bucket_id,
        note=row.note,
        created_at=row.created_at,
        updated_at=row.updated_at,
    ).unwrap()


def _apply_filters(statement, filters: TransactionFilters, user_id: int):
    statement = statement.where(Transaction.user_id == user_id)
    if filters.type is not None:
        statement = statement.where(Transaction.type == TransactionType(filters.type))
    if filters.start_date is not None:
        statement = statement.where(Transaction.transaction_date >= filters.start_date)
    if filters.end_date is not None:
        statement = statement.where(Transaction.transaction_date <= filters.end_date)
    if filters.category_id is not None:
        statement = statement.where(Transaction.category_id == filters.category_id)
    if filters.bucket_id is not None:
        statement = statement.where(Transaction.bucket_id == filters.bucket_id)
    term = (filters.search_term or "").strip().lower()
    if term:
        statement = statement.where(
            func.lower(Transaction.note).contains(term, autoescape=True)
        )
    return statement


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def _select_owned(self, transaction_id: int, user_id: int):
        return select(Transaction).where(
            Transaction.id == transaction_id, Transaction.user_id == user_id
        )

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[TransactionRecord]:
        """Retrieve a transaction by ID."""
        row = self.session.exec(self._select_owned(transaction_id, user_id)).first()
        return _to_record(row) if row else None

    def search(
        self,
        filters: TransactionFilters,
        *,
        user_id: int,
        offset: int = 0,
        limit: int = 20,
    ) -> list[TransactionRecord]:
        """Advanced search with multiple filters."""
        statement = _apply_filters(select(Transaction), filters, user_id)
        statement = (
            statement.order_by(
                Transaction.transaction_date.desc(),  # type: ignore
                Transaction.created_at.desc(),  # type: ignore
                Transaction.id.desc(),  # type: ignore
            )
            .offset(offset)
            .limit(limit)
        )
        return [_to_record(row) for row in self.session.exec(statement).all()]

    def count(self, filters: TransactionFilters, *, user_id: int) -> int:
        statement = _apply_filters(select(func.count(Transaction.id)), filters, user_id)
        return int(self.session.exec(statement).one())

    def totals_by_type(self, *, user_id: int) -> dict[TransactionType, Decimal]:
        statement = (
            select(Transaction.type, func.sum(Transaction.amount))
            .where(Transaction.user_id == user_id)
            .group_by(Transaction.type)
        )
        return {
            TransactionType(txn_type): Decimal(str(total))
            for txn_type, total in self.session.exec(statement).all()
            if total is not None
        }

    def create(self, transaction: TransactionRecord) -> TransactionRecord:
        """Create a new transaction."""
        row = Transaction(
            user_id=transaction.user_id,
            type=transaction.type,
            amount=transaction.amount,
            transaction_date=transaction.transaction_date,
            category_id=transaction.category_id,
            bucket_id=transaction.bucket_id,
            note=transaction.note,
        )
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def update(self, transaction: TransactionRecord) -> TransactionRecord:
        """Persist amount, date, references and note. Type and created_at are kept."""
        row = self.session.exec(self._select_owned(transaction.id, transaction.user_id)).one()
        row.amount = transaction.amount
        row.transaction_date = transaction.transaction_date
        row.category_id = transaction.category_id
        row.bucket_id = transaction.bucket_id
        row.note = transaction.note
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def delete(self, transaction_id: int, *, user_id: int) -> bool:
        """Delete a transaction by ID."""
        row = self.session.exec(self._select_owned(transaction_id, user_id)).first()
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        return True
