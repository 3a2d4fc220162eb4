"""SQLModel implementation of Bucket repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...domain.ledger import BucketStatus, TransactionType, fold_type_totals
from ...domain.records import BucketRecord
from ...models.bucket import Bucket
from ...models.transaction import Transaction
from ...models.user import utcnow


def _to_record(row: Bucket) -> BucketRecord:
    return BucketRecord.build(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=row.type,
        target_amount=row.target_amount,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    ).unwrap()


class SQLModelBucketRepository:
    """SQLModel-based bucket repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def _select_owned(self, bucket_id: int, user_id: int):
        return select(Bucket).where(Bucket.id == bucket_id, Bucket.user_id == user_id)

    def get_by_id(self, bucket_id: int, *, user_id: int) -> Optional[BucketRecord]:
        row = self.session.exec(self._select_owned(bucket_id, user_id)).first()
        return _to_record(row) if row else None

    def lock(self, bucket_id: int, *, user_id: int) -> Optional[BucketRecord]:
        """Retrieve a bucket with a row lock held until commit."""
        statement = self._select_owned(bucket_id, user_id).with_for_update()
        row = self.session.exec(statement).first()
        return _to_record(row) if row else None

    def list_all(
        self, *, user_id: int, status: Optional[BucketStatus] = None
    ) -> list[BucketRecord]:
        statement = select(Bucket).where(Bucket.user_id == user_id)
        if status is not None:
            statement = statement.where(Bucket.status == BucketStatus(status))
        statement = statement.order_by(Bucket.name, Bucket.id)  # type: ignore
        return [_to_record(row) for row in self.session.exec(statement).all()]

    def create(self, bucket: BucketRecord) -> BucketRecord:
        row = Bucket(
            user_id=bucket.user_id,
            name=bucket.name,
            type=bucket.type,
            target_amount=bucket.target_amount,
            status=bucket.status,
        )
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def update(self, bucket: BucketRecord) -> BucketRecord:
        """Persist name, target and status. Type is left untouched."""
        row = self.session.exec(self._select_owned(bucket.id, bucket.user_id)).one()
        row.name = bucket.name
        row.target_amount = bucket.target_amount
        row.status = bucket.status
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def calculate_balance(self, bucket_id: int) -> Decimal:
        """Sum amounts per type for the bucket and fold them through the type table.

        Recomputed on every call; there is no stored balance to drift.
        """
        statement = (
            select(Transaction.type, func.sum(Transaction.amount))
            .where(Transaction.bucket_id == bucket_id)
            .group_by(Transaction.type)
        )
        totals = {
            TransactionType(txn_type): Decimal(str(total))
            for txn_type, total in self.session.exec(statement).all()
            if total is not None
        }
        return fold_type_totals(totals, bucket=True)
