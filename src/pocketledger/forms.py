"""Form validation helpers that turn raw string input into typed values.

Callers (CLI prompts, HTTP handlers) run these before handing the typed values
to the services in :mod:`pocketledger.services`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .domain.ledger import BucketType, CategoryType, TransactionType, requires_bucket
from .domain.records import (
    MAX_COLOR_LENGTH,
    MAX_ICON_LENGTH,
    MAX_NAME_LENGTH,
    money_error,
)
from .errors import ValidationFailed
from .services.validators import transaction_field_errors


def _bind(keys: tuple[str, ...], data: Mapping[str, Any]) -> dict[str, str]:
    raw: dict[str, str] = {}
    for key in keys:
        value = data.get(key)
        if value is None:
            raw[key] = ""
        elif isinstance(value, str):
            raw[key] = value
        else:
            raw[key] = str(value)
    return raw


def _parse_decimal(raw: str) -> Optional[Decimal]:
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


class _FormMixin:
    errors: dict[str, list[str]]

    def _add_error(self, field: str, message: str) -> None:
        """Accumulate validation errors for a specific field."""

        self.errors.setdefault(field, []).append(message)

    def _parse_id(self, raw: str, field: str, label: str) -> Optional[int]:
        if not raw:
            return None
        try:
            parsed = int(raw)
        except (TypeError, ValueError):
            self._add_error(field, f"{label} must be a whole number.")
            return None
        if parsed <= 0:
            self._add_error(field, f"{label} must be greater than zero.")
            return None
        return parsed

    def raise_for_errors(self) -> None:
        """Raise :class:`ValidationFailed` carrying the collected errors."""

        if self.errors:
            raise ValidationFailed(self.errors)


@dataclass(slots=True)
class TransactionForm(_FormMixin):
    """Represents transaction input prior to validation."""

    type: TransactionType | None = None
    amount: Decimal | None = None
    transaction_date: date | None = None
    category_id: Optional[int] = None
    bucket_id: Optional[int] = None
    note: Optional[str] = None
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    KEYS = ("type", "amount", "transaction_date", "category_id", "bucket_id", "note")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TransactionForm:
        """Create a form populated from request data."""

        form = cls()
        form.raw_data = _bind(cls.KEYS, data)
        return form

    def validate(self, *, today: date | None = None) -> bool:
        """Validate the bound data and populate typed attributes."""

        self.errors.clear()

        type_raw = self.raw_data.get("type", "").strip().upper()
        self.type = None
        if not type_raw:
            self._add_error("type", "Type is required.")
        else:
            try:
                self.type = TransactionType(type_raw)
            except ValueError:
                self._add_error("type", f"Unknown transaction type: {type_raw}.")

        amount_raw = self.raw_data.get("amount", "").strip()
        self.amount = _parse_decimal(amount_raw) if amount_raw else None
        if amount_raw and self.amount is None:
            self._add_error("amount", "Enter a valid number for the amount.")

        date_raw = self.raw_data.get("transaction_date", "").strip()
        self.transaction_date = None
        if date_raw:
            try:
                self.transaction_date = datetime.strptime(date_raw, "%Y-%m-%d").date()
            except ValueError:
                self._add_error("transaction_date", "Enter a valid date (YYYY-MM-DD).")

        note = self.raw_data.get("note", "").strip()
        self.note = note or None

        self.category_id = self._parse_id(
            self.raw_data.get("category_id", "").strip(), "category_id", "Category"
        )
        self.bucket_id = self._parse_id(
            self.raw_data.get("bucket_id", "").strip(), "bucket_id", "Bucket"
        )

        # Parse failures above already explain themselves; skip the generic checks.
        field_errors = transaction_field_errors(
            amount=self.amount,
            transaction_date=self.transaction_date,
            note=self.note,
            today=today,
        )
        for name, messages in field_errors.items():
            if name in self.errors:
                continue
            for message in messages:
                self._add_error(name, message)

        if self.type is not None and "category_id" not in self.errors and "bucket_id" not in self.errors:
            if requires_bucket(self.type):
                if self.bucket_id is None:
                    self._add_error("bucket_id", "Bucket is required.")
            elif self.category_id is None:
                self._add_error("category_id", "Category is required.")

        return not self.errors


@dataclass(slots=True)
class CategoryForm(_FormMixin):
    """Represents category input prior to validation."""

    name: str = ""
    type: CategoryType | None = None
    color: Optional[str] = None
    icon: Optional[str] = None
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    KEYS = ("name", "type", "color", "icon")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CategoryForm:
        form = cls()
        form.raw_data = _bind(cls.KEYS, data)
        return form

    def validate(self) -> bool:
        self.errors.clear()

        self.name = self.raw_data.get("name", "").strip()
        if not self.name:
            self._add_error("name", "Name is required.")
        elif len(self.name) > MAX_NAME_LENGTH:
            self._add_error("name", f"Name must be {MAX_NAME_LENGTH} characters or fewer.")

        type_raw = self.raw_data.get("type", "").strip().upper()
        self.type = None
        try:
            self.type = CategoryType(type_raw)
        except ValueError:
            self._add_error("type", "Type must be INCOME or EXPENSE.")

        self.color = self.raw_data.get("color", "").strip() or None
        if self.color and len(self.color) > MAX_COLOR_LENGTH:
            self._add_error("color", f"Color must be {MAX_COLOR_LENGTH} characters or fewer.")
        self.icon = self.raw_data.get("icon", "").strip() or None
        if self.icon and len(self.icon) > MAX_ICON_LENGTH:
            self._add_error("icon", f"Icon must be {MAX_ICON_LENGTH} characters or fewer.")

        return not self.errors


@dataclass(slots=True)
class BucketForm(_FormMixin):
    """Represents bucket input prior to validation."""

    name: str = ""
    type: BucketType | None = None
    target_amount: Decimal | None = None
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    KEYS = ("name", "type", "target_amount")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BucketForm:
        form = cls()
        form.raw_data = _bind(cls.KEYS, data)
        return form

    def validate(self) -> bool:
        self.errors.clear()

        self.name = self.raw_data.get("name", "").strip()
        if not self.name:
            self._add_error("name", "Name is required.")
        elif len(self.name) > MAX_NAME_LENGTH:
            self._add_error("name", f"Name must be {MAX_NAME_LENGTH} characters or fewer.")

        type_raw = self.raw_data.get("type", "").strip().upper()
        self.type = None
        try:
            self.type = BucketType(type_raw)
        except ValueError:
            self._add_error("type", "Type must be SAVINGS_GOAL or PERPETUAL_ASSET.")

        target_raw = self.raw_data.get("target_amount", "").strip()
        self.target_amount = None
        if target_raw:
            parsed = _parse_decimal(target_raw)
            problem = "Enter a valid number for the target." if parsed is None else money_error(
                parsed, label="Target amount"
            )
            if problem:
                self._add_error("target_amount", problem)
            elif self.type is not None and not self.type.can_have_target:
                self._add_error(
                    "target_amount", "Only savings goals can have a target amount."
                )
            else:
                self.target_amount = parsed

        return not self.errors
