"""Mutation validators shared by the transaction orchestrators.

Each check raises the specific error kind on the first rule it finds broken.
Field-level input checks are the exception: they collect every problem into
one :class:`ValidationFailed`.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..domain.ledger import (
    ZERO,
    TransactionType,
    is_system_generated,
    requires_bucket,
    requires_category,
    to_money,
    withdrawal_headroom,
)
from ..domain.records import MAX_NOTE_LENGTH, BucketRecord, CategoryRecord, money_error
from ..domain.repositories import BucketRepository, CategoryRepository
from ..errors import BadRequest, BusinessRuleViolation, NotFound, ValidationFailed
from ..logging_config import get_logger

logger = get_logger(__name__)


def transaction_field_errors(
    *,
    amount: object,
    transaction_date: Optional[date],
    note: Optional[str],
    today: Optional[date] = None,
) -> dict[str, list[str]]:
    """Collect per-field problems with transaction input."""

    errors: dict[str, list[str]] = {}
    if amount is None:
        errors.setdefault("amount", []).append("Amount is required")
    else:
        problem = money_error(amount)
        if problem:
            errors.setdefault("amount", []).append(problem.capitalize())
    if transaction_date is None:
        errors.setdefault("transaction_date", []).append("Transaction date is required")
    elif transaction_date > (today or date.today()):
        errors.setdefault("transaction_date", []).append(
            "Transaction date cannot be in the future"
        )
    if note is not None and len(note) > MAX_NOTE_LENGTH:
        errors.setdefault("note", []).append(
            f"Note must not exceed {MAX_NOTE_LENGTH} characters"
        )
    return errors


def check_transaction_fields(
    *,
    amount: object,
    transaction_date: Optional[date],
    note: Optional[str],
    today: Optional[date] = None,
) -> None:
    errors = transaction_field_errors(
        amount=amount, transaction_date=transaction_date, note=note, today=today
    )
    if errors:
        raise ValidationFailed(errors)


def require_user_creatable(txn_type: TransactionType) -> None:
    if is_system_generated(txn_type):
        raise BadRequest(f"{txn_type.value} transactions cannot be created manually")


def require_user_editable(txn_type: TransactionType, *, action: str) -> None:
    if is_system_generated(txn_type):
        raise BadRequest(f"System-generated transactions cannot be {action}")


def check_reference_cardinality(
    txn_type: TransactionType, category_id: Optional[int], bucket_id: Optional[int]
) -> None:
    """Exactly the reference the type table names must be present."""

    label = txn_type.value
    if requires_category(txn_type):
        if category_id is None:
            raise BadRequest(f"{label} transactions require a category_id")
        if bucket_id is not None:
            raise BadRequest(f"{label} transactions cannot have a bucket_id")
    elif requires_bucket(txn_type):
        if bucket_id is None:
            raise BadRequest(f"{label} transactions require a bucket_id")
        if category_id is not None:
            raise BadRequest(f"{label} transactions cannot have a category_id")


def validate_category(
    categories: CategoryRepository,
    category_id: int,
    txn_type: TransactionType,
    *,
    user_id: int,
) -> CategoryRecord:
    """Category exists for this user, is not archived and matches the direction."""

    category = categories.get_by_id(category_id, user_id=user_id)
    if category is None:
        raise NotFound.for_entity("Category")
    if category.is_archived:
        raise BusinessRuleViolation(f"Cannot use archived category: {category.name}")
    if not category.can_be_used_with(txn_type):
        raise BusinessRuleViolation(
            f"Category '{category.name}' is type {category.type.value} "
            f"but transaction is type {txn_type.value}"
        )
    return category


def lock_active_bucket(
    buckets: BucketRepository, bucket_id: int, *, user_id: int
) -> BucketRecord:
    """Lock the bucket row for the rest of the unit of work; it must be ACTIVE."""

    bucket = buckets.lock(bucket_id, user_id=user_id)
    if bucket is None:
        raise NotFound.for_entity("Bucket")
    if not bucket.can_receive_transactions:
        raise BusinessRuleViolation(f"Cannot use archived bucket: {bucket.name}")
    return bucket


def lock_owned_bucket(
    buckets: BucketRepository, bucket_id: int, *, user_id: int
) -> BucketRecord:
    """Lock a bucket regardless of status (used when money leaves an old bucket)."""

    bucket = buckets.lock(bucket_id, user_id=user_id)
    if bucket is None:
        raise NotFound.for_entity("Bucket")
    return bucket


def ensure_withdrawal_covered(
    buckets: BucketRepository,
    bucket: BucketRecord,
    amount: Decimal,
    *,
    replacing: Decimal = ZERO,
) -> Decimal:
    """Reject a withdrawal the bucket cannot cover; return the balance read.

    ``replacing`` is the amount of an existing withdrawal from the same bucket
    that this one supersedes. The caller must already hold the bucket lock.
    """

    current = buckets.calculate_balance(bucket.id)
    headroom = withdrawal_headroom(current, replacing, amount)
    if headroom < ZERO:
        available = to_money(current) + to_money(replacing)
        logger.warning(
            "Withdrawal rejected for insufficient balance",
            extra={"bucket_id": bucket.id, "available": available, "requested": amount},
        )
        raise BusinessRuleViolation(
            f"Insufficient balance in bucket '{bucket.name}'. "
            f"Available: {available}, Requested withdrawal: {to_money(amount)}"
        )
    return current

