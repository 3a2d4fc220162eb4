"""Transaction lifecycle: create, update, delete, get and list.

Every call runs in one unit of work. Bucket-bound transactions lock the bucket
row before the balance is read, so a balance check and the write that relies
on it commit together.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..domain.ledger import (
    ZERO,
    TransactionType,
    bucket_balance_effect,
    requires_bucket,
    requires_category,
    usable_amount_effect,
)
from ..domain.records import Err, TransactionRecord
from ..domain.repositories import TransactionFilters
from ..errors import BadRequest, NotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..infra.unit_of_work import LedgerUnitOfWork, unit_of_work
from ..logging_config import get_logger
from .validators import (
    check_reference_cardinality,
    check_transaction_fields,
    ensure_withdrawal_covered,
    lock_active_bucket,
    lock_owned_bucket,
    require_user_creatable,
    require_user_editable,
    validate_category,
)

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_SEARCH_TERM_LENGTH = 100


@dataclass(frozen=True, slots=True)
class TransactionView:
    """A transaction plus the names of what it references, as of the read."""

    id: int
    type: TransactionType
    amount: Decimal
    transaction_date: date
    category_id: Optional[int]
    category_name: Optional[str]
    bucket_id: Optional[int]
    bucket_name: Optional[str]
    note: Optional[str]
    created_at: Optional[datetime]

    @property
    def usable_amount_effect(self) -> Decimal:
        return usable_amount_effect(self.type, self.amount)

    @property
    def bucket_balance_effect(self) -> Decimal:
        return bucket_balance_effect(self.type, self.amount)


@dataclass(frozen=True, slots=True)
class TransactionPage:
    items: list[TransactionView]
    total: int
    offset: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


def _view(
    record: TransactionRecord,
    *,
    category_name: Optional[str] = None,
    bucket_name: Optional[str] = None,
) -> TransactionView:
    return TransactionView(
        id=record.id,
        type=record.type,
        amount=record.amount,
        transaction_date=record.transaction_date,
        category_id=record.category_id,
        category_name=category_name,
        bucket_id=record.bucket_id,
        bucket_name=bucket_name,
        note=record.note,
        created_at=record.created_at,
    )


def _resolve_view(uow: LedgerUnitOfWork, record: TransactionRecord) -> TransactionView:
    """Attach category/bucket names, looked up under the same owner."""

    category_name = bucket_name = None
    if record.category_id is not None:
        category = uow.categories.get_by_id(record.category_id, user_id=record.user_id)
        category_name = category.name if category else None
    if record.bucket_id is not None:
        bucket = uow.buckets.get_by_id(record.bucket_id, user_id=record.user_id)
        bucket_name = bucket.name if bucket else None
    return _view(record, category_name=category_name, bucket_name=bucket_name)


def _build(**fields) -> TransactionRecord:
    result = TransactionRecord.build(**fields)
    if isinstance(result, Err):
        raise BadRequest(result.reason)
    return result.unwrap()


def _coerce_type(raw: TransactionType | str) -> TransactionType:
    try:
        return TransactionType(raw)
    except ValueError:
        raise ValidationFailed({"type": [f"Unknown transaction type: {raw}"]}) from None


def create_transaction(
    *,
    user_id: int,
    type: TransactionType | str,
    amount: Decimal,
    transaction_date: date,
    category_id: Optional[int] = None,
    bucket_id: Optional[int] = None,
    note: Optional[str] = None,
    session_factory: SessionFactory,
    today: Optional[date] = None,
) -> TransactionView:
    """Validate and record a user-initiated transaction."""

    txn_type = _coerce_type(type)
    require_user_creatable(txn_type)
    check_reference_cardinality(txn_type, category_id, bucket_id)
    check_transaction_fields(
        amount=amount, transaction_date=transaction_date, note=note, today=today
    )

    with unit_of_work(session_factory) as uow:
        category = bucket = None
        if requires_category(txn_type):
            category = validate_category(uow.categories, category_id, txn_type, user_id=user_id)
        elif requires_bucket(txn_type):
            bucket = lock_active_bucket(uow.buckets, bucket_id, user_id=user_id)
            if txn_type is TransactionType.WITHDRAWAL:
                ensure_withdrawal_covered(uow.buckets, bucket, amount)

        record = _build(
            user_id=user_id,
            type=txn_type,
            amount=amount,
            transaction_date=transaction_date,
            category_id=category_id,
            bucket_id=bucket_id,
            note=note,
        )
        saved = uow.transactions.create(record)
        logger.info(
            "Transaction created",
            extra={
                "user_id": user_id,
                "transaction_id": saved.id,
                "type": saved.type.value,
                "amount": saved.amount,
            },
        )
        return _view(
            saved,
            category_name=category.name if category else None,
            bucket_name=bucket.name if bucket else None,
        )


def _lock_in_order(uow: LedgerUnitOfWork, bucket_ids: list[int], *, user_id: int) -> None:
    """Lock buckets in ascending id order so concurrent moves cannot deadlock."""

    for bucket_id in sorted(set(bucket_ids)):
        lock_owned_bucket(uow.buckets, bucket_id, user_id=user_id)


def update_transaction(
    *,
    user_id: int,
    transaction_id: int,
    amount: Decimal,
    transaction_date: date,
    category_id: Optional[int] = None,
    bucket_id: Optional[int] = None,
    note: Optional[str] = None,
    session_factory: SessionFactory,
    today: Optional[date] = None,
) -> TransactionView:
    """Edit amount, date, reference and note. The type never changes."""

    check_transaction_fields(
        amount=amount, transaction_date=transaction_date, note=note, today=today
    )

    with unit_of_work(session_factory) as uow:
        existing = uow.transactions.get_by_id(transaction_id, user_id=user_id)
        if existing is None:
            raise NotFound.for_entity("Transaction")
        require_user_editable(existing.type, action="modified")
        txn_type = existing.type
        check_reference_cardinality(txn_type, category_id, bucket_id)

        category = bucket = None
        if requires_category(txn_type):
            category = validate_category(uow.categories, category_id, txn_type, user_id=user_id)
        else:
            _lock_in_order(uow, [existing.bucket_id, bucket_id], user_id=user_id)
            bucket = lock_active_bucket(uow.buckets, bucket_id, user_id=user_id)
            if txn_type is TransactionType.WITHDRAWAL:
                same_bucket = existing.bucket_id == bucket_id
                ensure_withdrawal_covered(
                    uow.buckets,
                    bucket,
                    amount,
                    replacing=existing.amount if same_bucket else ZERO,
                )

        record = _build(
            id=existing.id,
            user_id=existing.user_id,
            type=txn_type,
            amount=amount,
            transaction_date=transaction_date,
            category_id=category_id,
            bucket_id=bucket_id,
            note=note,
            created_at=existing.created_at,
        )
        saved = uow.transactions.update(record)
        logger.info(
            "Transaction updated",
            extra={
                "user_id": user_id,
                "transaction_id": saved.id,
                "type": saved.type.value,
                "old_amount": existing.amount,
                "amount": saved.amount,
            },
        )
        return _view(
            saved,
            category_name=category.name if category else None,
            bucket_name=bucket.name if bucket else None,
        )


def delete_transaction(
    *, user_id: int, transaction_id: int, session_factory: SessionFactory
) -> int:
    """Hard delete a user transaction; returns the deleted id."""

    with unit_of_work(session_factory) as uow:
        existing = uow.transactions.get_by_id(transaction_id, user_id=user_id)
        if existing is None:
            raise NotFound.for_entity("Transaction")
        require_user_editable(existing.type, action="deleted")

        if not uow.transactions.delete(transaction_id, user_id=user_id):
            raise RuntimeError("Transaction deletion failed unexpectedly")
        logger.info(
            "Transaction deleted",
            extra={"user_id": user_id, "transaction_id": transaction_id},
        )
        return transaction_id


def get_transaction(
    *, user_id: int, transaction_id: int, session_factory: SessionFactory
) -> TransactionView:
    with unit_of_work(session_factory) as uow:
        record = uow.transactions.get_by_id(transaction_id, user_id=user_id)
        if record is None:
            raise NotFound.for_entity("Transaction")
        return _resolve_view(uow, record)


def list_transactions(
    *,
    user_id: int,
    filters: Optional[TransactionFilters] = None,
    offset: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
    session_factory: SessionFactory,
) -> TransactionPage:
    """Filtered, newest-first page of a user's transactions."""

    filters = filters or TransactionFilters()
    errors: dict[str, list[str]] = {}
    if offset < 0:
        errors["offset"] = ["Offset must be 0 or greater"]
    if not 1 <= limit <= MAX_PAGE_SIZE:
        errors["limit"] = [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]
    if filters.type is not None:
        try:
            filters = replace(filters, type=_coerce_type(filters.type))
        except ValidationFailed as exc:
            errors.update(exc.field_errors)
    if filters.search_term and len(filters.search_term) > MAX_SEARCH_TERM_LENGTH:
        errors["search_term"] = [
            f"Search term must not exceed {MAX_SEARCH_TERM_LENGTH} characters"
        ]
    if errors:
        raise ValidationFailed(errors)

    with unit_of_work(session_factory) as uow:
        records = uow.transactions.search(filters, user_id=user_id, offset=offset, limit=limit)
        total = uow.transactions.count(filters, user_id=user_id)
        return TransactionPage(
            items=[_resolve_view(uow, record) for record in records],
            total=total,
            offset=offset,
            limit=limit,
        )
