"""SQLModel implementation of Category repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...domain.ledger import CategoryType
from ...domain.records import CategoryRecord
from ...models.category import Category
from ...models.transaction import Transaction
from ...models.user import utcnow


def _to_record(row: Category) -> CategoryRecord:
    return CategoryRecord.build(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=row.type,
        color=row.color,
        icon=row.icon,
        is_system=row.is_system,
        is_archived=row.is_archived,
        created_at=row.created_at,
        updated_at=row.updated_at,
    ).unwrap()


class SQLModelCategoryRepository:
    """SQLModel-based category repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def _select_owned(self, category_id: int, user_id: int):
        return select(Category).where(Category.id == category_id, Category.user_id == user_id)

    def get_by_id(self, category_id: int, *, user_id: int) -> Optional[CategoryRecord]:
        """Retrieve a category by ID."""
        row = self.session.exec(self._select_owned(category_id, user_id)).first()
        return _to_record(row) if row else None

    def lock(self, category_id: int, *, user_id: int) -> Optional[CategoryRecord]:
        """Retrieve a category with a row lock held until commit."""
        statement = self._select_owned(category_id, user_id).with_for_update()
        row = self.session.exec(statement).first()
        return _to_record(row) if row else None

    def exists_by_name_and_type(
        self, name: str, category_type: CategoryType, *, user_id: int
    ) -> bool:
        statement = select(Category.id).where(
            Category.user_id == user_id,
            Category.name == name,
            Category.type == CategoryType(category_type),
        )
        return self.session.exec(statement).first() is not None

    def list_all(
        self,
        *,
        user_id: int,
        category_type: Optional[CategoryType] = None,
        include_archived: bool = False,
    ) -> list[CategoryRecord]:
        """List categories ordered by name."""
        statement = select(Category).where(Category.user_id == user_id)
        if category_type is not None:
            statement = statement.where(Category.type == CategoryType(category_type))
        if not include_archived:
            statement = statement.where(Category.is_archived == False)  # noqa: E712
        statement = statement.order_by(Category.name, Category.id)  # type: ignore
        return [_to_record(row) for row in self.session.exec(statement).all()]

    def has_transactions(self, category_id: int, *, user_id: int) -> bool:
        statement = (
            select(Transaction.id)
            .where(Transaction.category_id == category_id)
            .where(Transaction.user_id == user_id)
            .limit(1)
        )
        return self.session.exec(statement).first() is not None

    def create(self, category: CategoryRecord) -> CategoryRecord:
        """Create a new category."""
        row = Category(
            user_id=category.user_id,
            name=category.name,
            type=category.type,
            color=category.color,
            icon=category.icon,
            is_system=category.is_system,
            is_archived=category.is_archived,
        )
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def update(self, category: CategoryRecord) -> CategoryRecord:
        """Persist name, color and icon. Type and flags are left untouched."""
        row = self.session.exec(self._select_owned(category.id, category.user_id)).one()
        row.name = category.name
        row.color = category.color
        row.icon = category.icon
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def archive(self, category_id: int, *, user_id: int) -> None:
        row = self.session.exec(self._select_owned(category_id, user_id)).one()
        row.is_archived = True
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.flush()

    def delete(self, category_id: int, *, user_id: int) -> bool:
        """Delete a category by ID."""
        row = self.session.exec(self._select_owned(category_id, user_id)).first()
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        return True
