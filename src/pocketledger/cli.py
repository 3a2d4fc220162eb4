"""Command line entry points for PocketLedger."""

from __future__ import annotations

import click

from .config import BaseConfig
from .errors import LedgerError, to_error_payload
from .infra.database import bootstrap_database
from .logging_config import setup_logging


class _Context:
    def __init__(self) -> None:
        self.config = BaseConfig()
        setup_logging(self.config)
        self._session_factory = None

    def session_factory(self):
        """Bootstrap the database on first use and return the session factory."""
        if self._session_factory is None:
            _, self._session_factory = bootstrap_database(self.config)
        return self._session_factory


pass_context = click.make_pass_decorator(_Context, ensure=True)


def _fail(exc: LedgerError) -> None:
    payload = to_error_payload(exc)
    raise click.ClickException(f"{payload.error}: {payload.message}")


@click.group()
def cli() -> None:
    """PocketLedger personal finance ledger."""


@cli.command("init-db")
@pass_context
def init_db(ctx: _Context) -> None:
    """Create the database schema."""

    ctx.session_factory()
    click.echo(f"Database ready: {ctx.config.DATABASE_URL}")


@cli.command("register")
@click.argument("email")
@click.password_option()
@click.option("--currency", default=None, help="Currency symbol (defaults to config)")
@pass_context
def register(ctx: _Context, email: str, password: str, currency: str | None) -> None:
    """Register an account and seed its system categories."""

    from .services.users import register_user

    try:
        user = register_user(
            email=email,
            password=password,
            currency_symbol=currency or ctx.config.DEFAULT_CURRENCY,
            session_factory=ctx.session_factory(),
        )
    except LedgerError as exc:
        _fail(exc)
    click.echo(f"Registered user {user.id} ({user.email})")


@cli.command("balance")
@click.argument("bucket_id", type=int)
@click.option("--user-id", type=int, required=True)
@pass_context
def balance(ctx: _Context, bucket_id: int, user_id: int) -> None:
    """Print a bucket's current balance."""

    from .services.buckets import get_bucket

    try:
        view = get_bucket(user_id=user_id, bucket_id=bucket_id, session_factory=ctx.session_factory())
    except LedgerError as exc:
        _fail(exc)
    click.echo(f"{view.name}: {view.balance}")


@cli.command("summary")
@click.option("--user-id", type=int, required=True)
@pass_context
def summary(ctx: _Context, user_id: int) -> None:
    """Print usable amount and totals for an account."""

    from .services.summary import ledger_summary
    from .services.users import get_user

    try:
        user = get_user(user_id=user_id, session_factory=ctx.session_factory())
        totals = ledger_summary(user_id=user_id, session_factory=ctx.session_factory())
    except LedgerError as exc:
        _fail(exc)
    symbol = user.currency_symbol
    click.echo(f"Usable amount:    {symbol} {totals.usable_amount}")
    click.echo(f"Total income:     {symbol} {totals.total_income}")
    click.echo(f"Total expense:    {symbol} {totals.total_expense}")
    click.echo(f"Total in buckets: {symbol} {totals.total_in_buckets}")


if __name__ == "__main__":
    cli()
