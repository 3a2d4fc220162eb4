"""Repository protocol definitions for domain layer."""

from .bucket import BucketRepository
from .category import CategoryRepository
from .transaction import TransactionFilters, TransactionRepository
from .user import UserRepository

__all__ = [
    "BucketRepository",
    "CategoryRepository",
    "TransactionFilters",
    "TransactionRepository",
    "UserRepository",
]
