"""Bucket lifecycle services.

A bucket's balance is never stored; every view recomputes it from the
transactions that reference the bucket.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..domain.ledger import ZERO, BucketStatus, BucketType, TransactionType
from ..domain.records import BucketRecord, Err, TransactionRecord
from ..errors import BadRequest, BusinessRuleViolation, NotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..infra.unit_of_work import LedgerUnitOfWork, unit_of_work
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BucketView:
    """A bucket together with its balance as of the read."""

    bucket: BucketRecord
    balance: Decimal

    @property
    def id(self) -> int:
        return self.bucket.id

    @property
    def name(self) -> str:
        return self.bucket.name

    @property
    def progress(self) -> Optional[Decimal]:
        """Fraction of the savings target reached, or None without a target."""
        if not self.bucket.has_target:
            return None
        return (self.balance / self.bucket.target_amount).quantize(Decimal("0.0001"))


@dataclass(frozen=True, slots=True)
class GoalCompletion:
    bucket: BucketRecord
    spent_amount: Decimal
    transaction_id: Optional[int]


def _build(**fields) -> BucketRecord:
    result = BucketRecord.build(**fields)
    if isinstance(result, Err):
        raise BadRequest(result.reason)
    return result.unwrap()


def _coerce(enum_cls, raw, field: str):
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationFailed({field: [f"Unknown {field}: {raw}"]}) from None


def _load_owned(uow: LedgerUnitOfWork, bucket_id: int, user_id: int, *, lock: bool = False):
    loader = uow.buckets.lock if lock else uow.buckets.get_by_id
    bucket = loader(bucket_id, user_id=user_id)
    if bucket is None:
        raise NotFound.for_entity("Bucket")
    return bucket


def _view(uow: LedgerUnitOfWork, bucket: BucketRecord) -> BucketView:
    return BucketView(bucket=bucket, balance=uow.buckets.calculate_balance(bucket.id))


def create_bucket(
    *,
    user_id: int,
    name: str,
    type: BucketType | str,
    target_amount: Optional[Decimal] = None,
    session_factory: SessionFactory,
) -> BucketView:
    bucket_type = _coerce(BucketType, type, "type")
    record = _build(user_id=user_id, name=name, type=bucket_type, target_amount=target_amount)
    with unit_of_work(session_factory) as uow:
        saved = uow.buckets.create(record)
        logger.info(
            "Bucket created",
            extra={"user_id": user_id, "bucket_id": saved.id, "type": saved.type.value},
        )
        return BucketView(bucket=saved, balance=ZERO)


def update_bucket(
    *,
    user_id: int,
    bucket_id: int,
    name: str,
    target_amount: Optional[Decimal] = None,
    session_factory: SessionFactory,
) -> BucketView:
    """Rename or retarget an active bucket. The type is fixed at creation."""

    with unit_of_work(session_factory) as uow:
        existing = _load_owned(uow, bucket_id, user_id, lock=True)
        if existing.is_archived:
            raise BusinessRuleViolation(f"Cannot modify archived bucket: {existing.name}")
        record = _build(
            id=existing.id,
            user_id=user_id,
            name=name,
            type=existing.type,
            target_amount=target_amount,
            status=existing.status,
            created_at=existing.created_at,
        )
        saved = uow.buckets.update(record)
        logger.info("Bucket updated", extra={"user_id": user_id, "bucket_id": saved.id})
        return _view(uow, saved)


def archive_bucket(*, user_id: int, bucket_id: int, session_factory: SessionFactory) -> BucketView:
    with unit_of_work(session_factory) as uow:
        existing = _load_owned(uow, bucket_id, user_id, lock=True)
        if existing.is_archived:
            raise BusinessRuleViolation(f"Bucket '{existing.name}' is already archived")
        saved = uow.buckets.update(replace(existing, status=BucketStatus.ARCHIVED))
        logger.info("Bucket archived", extra={"user_id": user_id, "bucket_id": saved.id})
        return _view(uow, saved)


def mark_as_spent(
    *,
    user_id: int,
    bucket_id: int,
    session_factory: SessionFactory,
    today: Optional[date] = None,
) -> GoalCompletion:
    """Complete a savings goal: drain its balance and archive it.

    The remaining balance leaves the bucket as a GOAL_COMPLETED transaction
    so the bucket's history still sums to zero. The usable amount is not
    affected.
    """

    with unit_of_work(session_factory) as uow:
        bucket = _load_owned(uow, bucket_id, user_id, lock=True)
        if not bucket.type.supports_mark_as_spent:
            raise BusinessRuleViolation(
                f"Only SAVINGS_GOAL buckets can be marked as spent, not {bucket.type.value}"
            )
        if not bucket.can_mark_as_spent:
            raise BusinessRuleViolation(f"Bucket '{bucket.name}' is already archived")

        balance = uow.buckets.calculate_balance(bucket.id)
        transaction_id = None
        if balance > ZERO:
            completion = TransactionRecord.build(
                user_id=user_id,
                type=TransactionType.GOAL_COMPLETED,
                amount=balance,
                transaction_date=today or date.today(),
                bucket_id=bucket.id,
                note=f"Goal completed: {bucket.name}",
            ).unwrap()
            transaction_id = uow.transactions.create(completion).id

        archived = uow.buckets.update(replace(bucket, status=BucketStatus.ARCHIVED))
        logger.info(
            "Savings goal marked as spent",
            extra={
                "user_id": user_id,
                "bucket_id": bucket.id,
                "amount": balance,
                "transaction_id": transaction_id,
            },
        )
        return GoalCompletion(
            bucket=archived,
            spent_amount=balance if balance > ZERO else ZERO,
            transaction_id=transaction_id,
        )


def get_bucket(*, user_id: int, bucket_id: int, session_factory: SessionFactory) -> BucketView:
    with unit_of_work(session_factory) as uow:
        return _view(uow, _load_owned(uow, bucket_id, user_id))


def list_buckets(
    *,
    user_id: int,
    status: Optional[BucketStatus | str] = None,
    session_factory: SessionFactory,
) -> list[BucketView]:
    if status is not None:
        status = _coerce(BucketStatus, status, "status")
    with unit_of_work(session_factory) as uow:
        return [_view(uow, bucket) for bucket in uow.buckets.list_all(user_id=user_id, status=status)]


def bucket_balance(*, user_id: int, bucket_id: int, session_factory: SessionFactory) -> Decimal:
    """Current balance of one of the user's buckets."""
    with unit_of_work(session_factory) as uow:
        bucket = _load_owned(uow, bucket_id, user_id)
        return uow.buckets.calculate_balance(bucket.id)
