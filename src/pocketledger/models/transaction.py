"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import CheckConstraint, Index
from sqlmodel import Field, SQLModel

from ..domain.ledger import TransactionType
from .user import utcnow


class Transaction(SQLModel, table=True):
    """A single ledger movement. Direction comes from ``type``, never the sign."""

    __tablename__: ClassVar[str] = "transaction"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        CheckConstraint(
            "(category_id IS NULL) <> (bucket_id IS NULL)",
            name="ck_transaction_single_reference",
        ),
        Index("ix_transaction_bucket_type", "bucket_id", "type"),
        Index("ix_transaction_user_date", "user_id", "transaction_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    type: TransactionType = Field(nullable=False)
    amount: Decimal = Field(nullable=False, max_digits=15, decimal_places=2)
    transaction_date: date = Field(nullable=False)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    bucket_id: Optional[int] = Field(default=None, foreign_key="bucket.id")
    note: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
