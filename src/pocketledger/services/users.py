"""Account registration and profile services."""

from __future__ import annotations

from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlalchemy.exc import IntegrityError

from ..domain.records import Err, UserRecord
from ..errors import AuthenticationFailed, DuplicateResource, NotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..infra.unit_of_work import unit_of_work
from ..logging_config import get_logger
from .categories import seed_system_categories

logger = get_logger(__name__)

_hasher = PasswordHasher()
MIN_PASSWORD_LENGTH = 8
MAX_CURRENCY_SYMBOL_LENGTH = 10


def _duplicate(email: str) -> DuplicateResource:
    return DuplicateResource(f"Account with email {email} already exists")


def register_user(
    *,
    email: str,
    password: str,
    currency_symbol: Optional[str] = None,
    session_factory: SessionFactory,
) -> UserRecord:
    """Create an account with a hashed password and its system categories."""

    errors: dict[str, list[str]] = {}
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]
    if currency_symbol is not None and len(currency_symbol.strip()) > MAX_CURRENCY_SYMBOL_LENGTH:
        errors["currency_symbol"] = [
            f"Currency symbol must not exceed {MAX_CURRENCY_SYMBOL_LENGTH} characters"
        ]
    result = UserRecord.build(
        email=email, password_hash=None, currency_symbol=currency_symbol
    )
    if isinstance(result, Err):
        errors.setdefault("email" if "email" in result.reason else "currency_symbol", []).append(
            result.reason.capitalize()
        )
    if errors:
        raise ValidationFailed(errors)

    record = result.unwrap()
    try:
        with unit_of_work(session_factory) as uow:
            if uow.users.exists_by_email(record.email):
                raise _duplicate(record.email)
            saved = uow.users.create(
                UserRecord(
                    id=None,
                    email=record.email,
                    password_hash=_hasher.hash(password),
                    currency_symbol=record.currency_symbol,
                )
            )
            seeded = seed_system_categories(uow, user_id=saved.id)
    except IntegrityError:
        raise _duplicate(record.email) from None

    logger.info(
        "User registered",
        extra={"user_id": saved.id, "system_categories": seeded},
    )
    return saved


def authenticate(*, email: str, password: str, session_factory: SessionFactory) -> UserRecord:
    """Return the account when the password matches; one message for every failure."""

    with unit_of_work(session_factory) as uow:
        user = uow.users.get_by_email(email)
    if user is None or not user.password_hash:
        raise AuthenticationFailed("Invalid email or password")
    try:
        _hasher.verify(user.password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        logger.warning("Failed login attempt", extra={"user_id": user.id})
        raise AuthenticationFailed("Invalid email or password") from None
    return user


def get_user(*, user_id: int, session_factory: SessionFactory) -> UserRecord:
    with unit_of_work(session_factory) as uow:
        user = uow.users.get_by_id(user_id)
    if user is None:
        raise NotFound.for_entity("User")
    return user


def update_currency_symbol(
    *, user_id: int, currency_symbol: str, session_factory: SessionFactory
) -> UserRecord:
    symbol = (currency_symbol or "").strip()
    if not symbol:
        raise ValidationFailed({"currency_symbol": ["Currency symbol is required"]})
    if len(symbol) > MAX_CURRENCY_SYMBOL_LENGTH:
        raise ValidationFailed(
            {
                "currency_symbol": [
                    f"Currency symbol must not exceed {MAX_CURRENCY_SYMBOL_LENGTH} characters"
                ]
            }
        )
    with unit_of_work(session_factory) as uow:
        user = uow.users.update_currency_symbol(user_id, symbol)
        if user is None:
            raise NotFound.for_entity("User")
    logger.info("Currency symbol updated", extra={"user_id": user_id, "currency": symbol})
    return user
