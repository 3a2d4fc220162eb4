"""Service module exports."""

from . import buckets, categories, summary, transactions, users, validators

__all__ = [
    "buckets",
    "categories",
    "summary",
    "transactions",
    "users",
    "validators",
]
