"""One session, all repositories: the atomic scope of a single service call."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlmodel import Session

from .database import SessionFactory
from .repositories import (
    SQLModelBucketRepository,
    SQLModelCategoryRepository,
    SQLModelTransactionRepository,
    SQLModelUserRepository,
)


class LedgerUnitOfWork:
    """Repositories sharing one session, so validation reads and writes commit together."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = SQLModelUserRepository(session)
        self.categories = SQLModelCategoryRepository(session)
        self.buckets = SQLModelBucketRepository(session)
        self.transactions = SQLModelTransactionRepository(session)


@contextmanager
def unit_of_work(session_factory: SessionFactory) -> Iterator[LedgerUnitOfWork]:
    """Open a unit of work; commit on success, roll back on any exception."""

    with session_factory() as session:
        yield LedgerUnitOfWork(session)
