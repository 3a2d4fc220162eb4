"""Category repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ..ledger import CategoryType
from ..records import CategoryRecord


class CategoryRepository(Protocol):
    """Repository for managing category entities. Every call is user-scoped."""

    def get_by_id(self, category_id: int, *, user_id: int) -> Optional[CategoryRecord]:
        """Retrieve a category by ID."""
        ...

    def lock(self, category_id: int, *, user_id: int) -> Optional[CategoryRecord]:
        """Retrieve a category and hold a row lock on it until commit."""
        ...

    def exists_by_name_and_type(
        self, name: str, category_type: CategoryType, *, user_id: int
    ) -> bool:
        ...

    def list_all(
        self,
        *,
        user_id: int,
        category_type: Optional[CategoryType] = None,
        include_archived: bool = False,
    ) -> list[CategoryRecord]:
        """List categories ordered by name."""
        ...

    def has_transactions(self, category_id: int, *, user_id: int) -> bool:
        ...

    def create(self, category: CategoryRecord) -> CategoryRecord:
        ...

    def update(self, category: CategoryRecord) -> CategoryRecord:
        """Persist name, color and icon changes."""
        ...

    def archive(self, category_id: int, *, user_id: int) -> None:
        ...

    def delete(self, category_id: int, *, user_id: int) -> bool:
        ...
