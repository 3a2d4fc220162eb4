"""Immutable domain records and their validating factories.

Factories return ``Ok(record)`` or ``Err(reason)`` rather than raising, so a
caller decides which error kind an invariant violation maps to. Records are
frozen; edits go through :func:`dataclasses.replace` plus a fresh factory
call when invariants may change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Generic, NoReturn, TypeVar, Union

from .ledger import (
    CENTS,
    BucketStatus,
    BucketType,
    CategoryType,
    TransactionType,
    bucket_balance_effect,
    category_matches,
    is_system_generated,
    requires_bucket,
    requires_category,
    usable_amount_effect,
)

MAX_NOTE_LENGTH = 500
MAX_NAME_LENGTH = 100
MAX_COLOR_LENGTH = 20
MAX_ICON_LENGTH = 50
MAX_AMOUNT_INTEGER_DIGITS = 13
DEFAULT_CURRENCY = "LKR"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    reason: str

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise ValueError(self.reason)


Result = Union[Ok[T], Err]


def money_error(amount: object, *, label: str = "amount") -> str | None:
    """Return why ``amount`` is not a valid positive money value, or None."""

    if isinstance(amount, float) or not isinstance(amount, (Decimal, int)):
        return f"{label} must be a Decimal"
    try:
        value = Decimal(amount)
    except InvalidOperation:
        return f"{label} must be a number"
    if not value.is_finite():
        return f"{label} must be a finite number"
    if value <= 0:
        return f"{label} must be positive"
    if value != value.quantize(CENTS):
        return f"{label} must have at most 2 decimal places"
    if value.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        return f"{label} must have at most {MAX_AMOUNT_INTEGER_DIGITS} integer digits"
    return None


@dataclass(frozen=True, slots=True)
class UserRecord:
    id: int | None
    email: str
    password_hash: str | None
    currency_symbol: str = DEFAULT_CURRENCY
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def build(
        cls,
        *,
        email: str,
        password_hash: str | None,
        currency_symbol: str | None = None,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Result[UserRecord]:
        normalized = (email or "").strip().lower()
        if not normalized:
            return Err("email must not be blank")
        symbol = (currency_symbol or DEFAULT_CURRENCY).strip()
        if not symbol:
            return Err("currency_symbol must not be blank")
        return Ok(
            cls(
                id=id,
                email=normalized,
                password_hash=password_hash,
                currency_symbol=symbol,
                created_at=created_at,
                updated_at=updated_at,
            )
        )

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def has_email(self, candidate: str) -> bool:
        return self.email == (candidate or "").strip().lower()


@dataclass(frozen=True, slots=True)
class CategoryRecord:
    id: int | None
    user_id: int
    name: str
    type: CategoryType
    color: str | None = None
    icon: str | None = None
    is_system: bool = False
    is_archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def build(
        cls,
        *,
        user_id: int | None,
        name: str,
        type: CategoryType | str,
        color: str | None = None,
        icon: str | None = None,
        is_system: bool = False,
        is_archived: bool = False,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Result[CategoryRecord]:
        if user_id is None:
            return Err("user_id must not be null")
        normalized = (name or "").strip()
        if not normalized:
            return Err("name must not be blank")
        if len(normalized) > MAX_NAME_LENGTH:
            return Err(f"name must not exceed {MAX_NAME_LENGTH} characters")
        try:
            category_type = CategoryType(type)
        except ValueError:
            return Err(f"unknown category type: {type}")
        if color is not None and len(color) > MAX_COLOR_LENGTH:
            return Err(f"color must not exceed {MAX_COLOR_LENGTH} characters")
        if icon is not None and len(icon) > MAX_ICON_LENGTH:
            return Err(f"icon must not exceed {MAX_ICON_LENGTH} characters")
        return Ok(
            cls(
                id=id,
                user_id=user_id,
                name=normalized,
                type=category_type,
                color=color,
                icon=icon,
                is_system=bool(is_system),
                is_archived=bool(is_archived),
                created_at=created_at,
                updated_at=updated_at,
            )
        )

    @property
    def is_protected(self) -> bool:
        return self.is_system

    @property
    def is_active(self) -> bool:
        return not self.is_archived

    def can_be_used_with(self, txn_type: TransactionType) -> bool:
        return category_matches(self.type, txn_type)


@dataclass(frozen=True, slots=True)
class BucketRecord:
    id: int | None
    user_id: int
    name: str
    type: BucketType
    target_amount: Decimal | None = None
    status: BucketStatus = BucketStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def build(
        cls,
        *,
        user_id: int | None,
        name: str,
        type: BucketType | str,
        target_amount: Decimal | None = None,
        status: BucketStatus | str | None = None,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Result[BucketRecord]:
        if user_id is None:
            return Err("user_id must not be null")
        normalized = (name or "").strip()
        if not normalized:
            return Err("name must not be blank")
        if len(normalized) > MAX_NAME_LENGTH:
            return Err(f"name must not exceed {MAX_NAME_LENGTH} characters")
        try:
            bucket_type = BucketType(type)
            bucket_status = BucketStatus(status or BucketStatus.ACTIVE)
        except ValueError as exc:
            return Err(str(exc))
        if target_amount is not None:
            if not bucket_type.can_have_target:
                return Err(
                    f"target_amount can only be set for SAVINGS_GOAL buckets, not {bucket_type.value}"
                )
            problem = money_error(target_amount, label="target_amount")
            if problem:
                return Err(problem)
            target_amount = Decimal(target_amount).quantize(CENTS)
        return Ok(
            cls(
                id=id,
                user_id=user_id,
                name=normalized,
                type=bucket_type,
                target_amount=target_amount,
                status=bucket_status,
                created_at=created_at,
                updated_at=updated_at,
            )
        )

    @property
    def is_active(self) -> bool:
        return self.status is BucketStatus.ACTIVE

    @property
    def is_archived(self) -> bool:
        return self.status is BucketStatus.ARCHIVED

    @property
    def has_target(self) -> bool:
        return self.target_amount is not None

    @property
    def can_receive_transactions(self) -> bool:
        return self.status.allows_transactions

    @property
    def can_mark_as_spent(self) -> bool:
        return self.type.supports_mark_as_spent and self.status.allows_transactions


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    id: int | None
    user_id: int
    type: TransactionType
    amount: Decimal
    transaction_date: date
    category_id: int | None = None
    bucket_id: int | None = None
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def build(
        cls,
        *,
        user_id: int | None,
        type: TransactionType | str,
        amount: Decimal,
        transaction_date: date | None,
        category_id: int | None = None,
        bucket_id: int | None = None,
        note: str | None = None,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Result[TransactionRecord]:
        if user_id is None:
            return Err("user_id must not be null")
        try:
            txn_type = TransactionType(type)
        except ValueError:
            return Err(f"unknown transaction type: {type}")
        problem = money_error(amount)
        if problem:
            return Err(problem)
        if transaction_date is None:
            return Err("transaction_date must not be null")
        if requires_category(txn_type):
            if category_id is None:
                return Err(f"{txn_type.value} transactions require a category_id")
            if bucket_id is not None:
                return Err(f"{txn_type.value} transactions cannot have a bucket_id")
        if requires_bucket(txn_type):
            if bucket_id is None:
                return Err(f"{txn_type.value} transactions require a bucket_id")
            if category_id is not None:
                return Err(f"{txn_type.value} transactions cannot have a category_id")
        if note is not None and len(note) > MAX_NOTE_LENGTH:
            return Err(f"note exceeds maximum length of {MAX_NOTE_LENGTH}")
        return Ok(
            cls(
                id=id,
                user_id=user_id,
                type=txn_type,
                amount=Decimal(amount).quantize(CENTS),
                transaction_date=transaction_date,
                category_id=category_id,
                bucket_id=bucket_id,
                note=note,
                created_at=created_at,
                updated_at=updated_at,
            )
        )

    @property
    def usable_amount_effect(self) -> Decimal:
        return usable_amount_effect(self.type, self.amount)

    @property
    def bucket_balance_effect(self) -> Decimal:
        return bucket_balance_effect(self.type, self.amount)

    @property
    def is_system_generated(self) -> bool:
        return is_system_generated(self.type)

    @property
    def can_be_edited(self) -> bool:
        return not self.is_system_generated

    @property
    def can_be_deleted(self) -> bool:
        return not self.is_system_generated

    @property
    def has_note(self) -> bool:
        return bool(self.note and self.note.strip())
