"""SQLModel implementation of User repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...domain.records import UserRecord
from ...models.user import User, utcnow


def _to_record(row: User) -> UserRecord:
    return UserRecord.build(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        currency_symbol=row.currency_symbol,
        created_at=row.created_at,
        updated_at=row.updated_at,
    ).unwrap()


class SQLModelUserRepository:
    """SQLModel-based user repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        row = self.session.get(User, user_id)
        return _to_record(row) if row else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        normalized = (email or "").strip().lower()
        row = self.session.exec(select(User).where(func.lower(User.email) == normalized)).first()
        return _to_record(row) if row else None

    def exists_by_email(self, email: str) -> bool:
        normalized = (email or "").strip().lower()
        statement = select(User.id).where(func.lower(User.email) == normalized)
        return self.session.exec(statement).first() is not None

    def create(self, user: UserRecord) -> UserRecord:
        row = User(
            email=user.email,
            password_hash=user.password_hash,
            currency_symbol=user.currency_symbol,
        )
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def update_currency_symbol(self, user_id: int, currency_symbol: str) -> Optional[UserRecord]:
        row = self.session.get(User, user_id)
        if row is None:
            return None
        row.currency_symbol = currency_symbol
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)
