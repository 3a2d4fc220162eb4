"""Category lifecycle services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError

from ..constants.categories import system_category_rows
from ..domain.ledger import CategoryType
from ..domain.records import CategoryRecord, Err
from ..errors import BadRequest, BusinessRuleViolation, DuplicateResource, NotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..infra.unit_of_work import LedgerUnitOfWork, unit_of_work
from ..logging_config import get_logger

logger = get_logger(__name__)


class DeletionOutcome(str, Enum):
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


@dataclass(frozen=True, slots=True)
class CategoryDeletion:
    category_id: int
    outcome: DeletionOutcome

    @property
    def was_archived(self) -> bool:
        return self.outcome is DeletionOutcome.ARCHIVED


def _duplicate(name: str, category_type: CategoryType) -> DuplicateResource:
    return DuplicateResource(
        f"Category with name '{name}' and type '{CategoryType(category_type).value}' already exists"
    )


def _coerce_type(raw: CategoryType | str) -> CategoryType:
    try:
        return CategoryType(raw)
    except ValueError:
        raise ValidationFailed({"type": [f"Unknown category type: {raw}"]}) from None


def _build(**fields) -> CategoryRecord:
    result = CategoryRecord.build(**fields)
    if isinstance(result, Err):
        raise BadRequest(result.reason)
    return result.unwrap()


def _load_owned(uow: LedgerUnitOfWork, category_id: int, user_id: int, *, lock: bool = False):
    loader = uow.categories.lock if lock else uow.categories.get_by_id
    category = loader(category_id, user_id=user_id)
    if category is None:
        raise NotFound.for_entity("Category")
    return category


def create_category(
    *,
    user_id: int,
    name: str,
    type: CategoryType | str,
    color: Optional[str] = None,
    icon: Optional[str] = None,
    session_factory: SessionFactory,
) -> CategoryRecord:
    """Create a user category; names are unique per user and type."""

    category_type = _coerce_type(type)
    record = _build(user_id=user_id, name=name, type=category_type, color=color, icon=icon)

    try:
        with unit_of_work(session_factory) as uow:
            if uow.categories.exists_by_name_and_type(record.name, category_type, user_id=user_id):
                raise _duplicate(record.name, category_type)
            saved = uow.categories.create(record)
    except IntegrityError:
        # Lost a race with a concurrent insert of the same name.
        raise _duplicate(record.name, category_type) from None

    logger.info(
        "Category created",
        extra={"user_id": user_id, "category_id": saved.id, "type": saved.type.value},
    )
    return saved


def update_category(
    *,
    user_id: int,
    category_id: int,
    name: str,
    color: Optional[str] = None,
    icon: Optional[str] = None,
    session_factory: SessionFactory,
) -> CategoryRecord:
    """Rename or recolor a user category. Type and flags never change here."""

    try:
        with unit_of_work(session_factory) as uow:
            existing = _load_owned(uow, category_id, user_id)
            if existing.is_protected:
                raise BusinessRuleViolation("System categories cannot be updated")
            record = _build(
                id=existing.id,
                user_id=user_id,
                name=name,
                type=existing.type,
                color=color,
                icon=icon,
                is_system=existing.is_system,
                is_archived=existing.is_archived,
                created_at=existing.created_at,
            )
            if record.name != existing.name and uow.categories.exists_by_name_and_type(
                record.name, existing.type, user_id=user_id
            ):
                raise _duplicate(record.name, existing.type)
            saved = uow.categories.update(record)
    except IntegrityError:
        raise _duplicate(name.strip(), existing.type) from None

    logger.info("Category updated", extra={"user_id": user_id, "category_id": saved.id})
    return saved


def delete_category(
    *, user_id: int, category_id: int, session_factory: SessionFactory
) -> CategoryDeletion:
    """Delete a category, or archive it when transactions still reference it."""

    with unit_of_work(session_factory) as uow:
        category = _load_owned(uow, category_id, user_id, lock=True)
        if category.is_protected:
            raise BusinessRuleViolation("System categories cannot be deleted")

        if uow.categories.has_transactions(category_id, user_id=user_id):
            uow.categories.archive(category_id, user_id=user_id)
            outcome = DeletionOutcome.ARCHIVED
        else:
            uow.categories.delete(category_id, user_id=user_id)
            outcome = DeletionOutcome.DELETED

    logger.info(
        "Category removed",
        extra={"user_id": user_id, "category_id": category_id, "outcome": outcome.value},
    )
    return CategoryDeletion(category_id=category_id, outcome=outcome)


def get_category(
    *, user_id: int, category_id: int, session_factory: SessionFactory
) -> CategoryRecord:
    with unit_of_work(session_factory) as uow:
        return _load_owned(uow, category_id, user_id)


def list_categories(
    *,
    user_id: int,
    category_type: Optional[CategoryType | str] = None,
    include_archived: bool = False,
    session_factory: SessionFactory,
) -> list[CategoryRecord]:
    """Return categories ordered by name, archived ones only on request."""

    if category_type is not None:
        category_type = _coerce_type(category_type)
    with unit_of_work(session_factory) as uow:
        return uow.categories.list_all(
            user_id=user_id, category_type=category_type, include_archived=include_archived
        )


def seed_system_categories(uow: LedgerUnitOfWork, *, user_id: int) -> int:
    """Insert the system category set for a user inside an open unit of work.

    Rows the user already has (same name and type) are skipped. Returns the
    number created.
    """

    created = 0
    for name, category_type, color, icon in system_category_rows():
        if uow.categories.exists_by_name_and_type(name, category_type, user_id=user_id):
            continue
        uow.categories.create(
            _build(
                user_id=user_id,
                name=name,
                type=category_type,
                color=color,
                icon=icon,
                is_system=True,
            )
        )
        created += 1
    return created
