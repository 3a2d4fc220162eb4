"""Savings bucket definitions. Balances are derived, never stored here."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from ..domain.ledger import BucketStatus, BucketType
from .user import utcnow


class Bucket(SQLModel, table=True):
    """A savings goal or a perpetual asset holding invested money."""

    __tablename__: ClassVar[str] = "bucket"
    __table_args__ = (
        CheckConstraint(
            "target_amount IS NULL OR (type = 'SAVINGS_GOAL' AND target_amount > 0)",
            name="ck_bucket_target_goal_only",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)
    type: BucketType = Field(nullable=False)
    target_amount: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    status: BucketStatus = Field(default=BucketStatus.ACTIVE, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
