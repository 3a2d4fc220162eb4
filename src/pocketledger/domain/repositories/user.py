"""User repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ..records import UserRecord


class UserRepository(Protocol):
    """Repository for managing user entities."""

    def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        ...

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Case-insensitive lookup."""
        ...

    def exists_by_email(self, email: str) -> bool:
        ...

    def create(self, user: UserRecord) -> UserRecord:
        ...

    def update_currency_symbol(self, user_id: int, currency_symbol: str) -> Optional[UserRecord]:
        ...
