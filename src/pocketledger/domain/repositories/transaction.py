"""Transaction repository protocol."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol

from ..ledger import TransactionType
from ..records import TransactionRecord


@dataclass(slots=True)
class TransactionFilters:
    """Optional filters applied to transaction listings."""

    type: Optional[TransactionType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_id: Optional[int] = None
    bucket_id: Optional[int] = None
    search_term: Optional[str] = None


class TransactionRepository(Protocol):
    """Repository for managing transaction entities."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[TransactionRecord]:
        """Retrieve a transaction by ID."""
        ...

    def search(
        self,
        filters: TransactionFilters,
        *,
        user_id: int,
        offset: int = 0,
        limit: int = 20,
    ) -> list[TransactionRecord]:
        """Newest first: transaction_date, then created_at, then id."""
        ...

    def count(self, filters: TransactionFilters, *, user_id: int) -> int:
        ...

    def totals_by_type(self, *, user_id: int) -> dict[TransactionType, Decimal]:
        """Sum of amounts per type across all of a user's transactions."""
        ...

    def create(self, transaction: TransactionRecord) -> TransactionRecord:
        ...

    def update(self, transaction: TransactionRecord) -> TransactionRecord:
        ...

    def delete(self, transaction_id: int, *, user_id: int) -> bool:
        """Hard delete. Returns False when nothing matched."""
        ...
