"""Transaction type table and the pure balance arithmetic built on it.

Every per-type rule (which reference a type needs, how it moves the usable
amount and a bucket balance, whether a user may create it) lives in
``TYPE_EFFECTS``. Adding a transaction type means adding one row there; the
import-time check below refuses to load the module if a member is missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Mapping, Protocol

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    INVESTMENT = "INVESTMENT"
    WITHDRAWAL = "WITHDRAWAL"
    GOAL_COMPLETED = "GOAL_COMPLETED"


class CategoryType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class BucketType(str, Enum):
    SAVINGS_GOAL = "SAVINGS_GOAL"
    PERPETUAL_ASSET = "PERPETUAL_ASSET"

    @property
    def can_have_target(self) -> bool:
        return self is BucketType.SAVINGS_GOAL

    @property
    def supports_mark_as_spent(self) -> bool:
        return self is BucketType.SAVINGS_GOAL


class BucketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"

    @property
    def allows_transactions(self) -> bool:
        return self is BucketStatus.ACTIVE


class Reference(str, Enum):
    """Which foreign reference a transaction type carries."""

    CATEGORY = "category"
    BUCKET = "bucket"


@dataclass(frozen=True, slots=True)
class TypeEffect:
    """One row of the type table."""

    requires: Reference
    usable_sign: int
    bucket_sign: int
    user_creatable: bool
    category_type: CategoryType | None = None


TYPE_EFFECTS: Mapping[TransactionType, TypeEffect] = {
    TransactionType.INCOME: TypeEffect(Reference.CATEGORY, +1, 0, True, CategoryType.INCOME),
    TransactionType.EXPENSE: TypeEffect(Reference.CATEGORY, -1, 0, True, CategoryType.EXPENSE),
    TransactionType.INVESTMENT: TypeEffect(Reference.BUCKET, -1, +1, True),
    TransactionType.WITHDRAWAL: TypeEffect(Reference.BUCKET, +1, -1, True),
    TransactionType.GOAL_COMPLETED: TypeEffect(Reference.BUCKET, 0, -1, False),
}

_missing = set(TransactionType) - set(TYPE_EFFECTS)
if _missing:  # pragma: no cover - guards future edits
    raise RuntimeError(f"TYPE_EFFECTS is missing rows for: {sorted(t.value for t in _missing)}")

BUCKET_TYPES = frozenset(t for t, e in TYPE_EFFECTS.items() if e.requires is Reference.BUCKET)
CATEGORY_TYPES = frozenset(t for t, e in TYPE_EFFECTS.items() if e.requires is Reference.CATEGORY)


def effect_of(txn_type: TransactionType) -> TypeEffect:
    return TYPE_EFFECTS[TransactionType(txn_type)]


def requires_category(txn_type: TransactionType) -> bool:
    return effect_of(txn_type).requires is Reference.CATEGORY


def requires_bucket(txn_type: TransactionType) -> bool:
    return effect_of(txn_type).requires is Reference.BUCKET


def is_system_generated(txn_type: TransactionType) -> bool:
    return not effect_of(txn_type).user_creatable


def category_matches(category_type: CategoryType, txn_type: TransactionType) -> bool:
    """INCOME categories pair with INCOME transactions, EXPENSE with EXPENSE."""

    return effect_of(txn_type).category_type is CategoryType(category_type)


def to_money(value: Decimal | int | str) -> Decimal:
    """Coerce to a cents-quantized Decimal. Floats are refused."""

    if isinstance(value, float):
        raise TypeError("money values must not be binary floats")
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def usable_amount_effect(txn_type: TransactionType, amount: Decimal) -> Decimal:
    return to_money(amount) * effect_of(txn_type).usable_sign


def bucket_balance_effect(txn_type: TransactionType, amount: Decimal) -> Decimal:
    return to_money(amount) * effect_of(txn_type).bucket_sign


class _Movement(Protocol):
    type: TransactionType
    amount: Decimal


def fold_bucket_balance(movements: Iterable[_Movement]) -> Decimal:
    """Sum the bucket-balance effect of every movement."""

    total = ZERO
    for movement in movements:
        total += bucket_balance_effect(movement.type, movement.amount)
    return to_money(total)


def fold_usable_amount(movements: Iterable[_Movement]) -> Decimal:
    """Sum the usable-amount effect of every movement."""

    total = ZERO
    for movement in movements:
        total += usable_amount_effect(movement.type, movement.amount)
    return to_money(total)


def fold_type_totals(totals: Mapping[TransactionType, Decimal], *, bucket: bool) -> Decimal:
    """Fold per-type sums (as returned by an aggregate query) through the table."""

    total = ZERO
    for txn_type, amount in totals.items():
        effect = effect_of(txn_type)
        sign = effect.bucket_sign if bucket else effect.usable_sign
        total += to_money(amount) * sign
    return to_money(total)


def withdrawal_headroom(current_balance: Decimal, old_amount: Decimal, new_amount: Decimal) -> Decimal:
    """Balance left after replacing an existing withdrawal of ``old_amount``.

    ``current_balance`` already has ``old_amount`` taken out, so it is credited
    back before ``new_amount`` is subtracted. The edit is allowed when the
    result is not negative.
    """

    return to_money(current_balance) + to_money(old_amount) - to_money(new_amount)
