"""Bucket repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ..ledger import BucketStatus
from ..records import BucketRecord


class BucketRepository(Protocol):
    """Repository for buckets and their derived balances."""

    def get_by_id(self, bucket_id: int, *, user_id: int) -> Optional[BucketRecord]:
        ...

    def lock(self, bucket_id: int, *, user_id: int) -> Optional[BucketRecord]:
        """Retrieve a bucket and hold a row lock on it until commit."""
        ...

    def list_all(
        self, *, user_id: int, status: Optional[BucketStatus] = None
    ) -> list[BucketRecord]:
        ...

    def create(self, bucket: BucketRecord) -> BucketRecord:
        ...

    def update(self, bucket: BucketRecord) -> BucketRecord:
        """Persist name, target and status changes."""
        ...

    def calculate_balance(self, bucket_id: int) -> Decimal:
        """Fold every transaction referencing the bucket through the type table."""
        ...
