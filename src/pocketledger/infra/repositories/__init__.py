"""Concrete repository implementations using SQLModel."""

from .bucket import SQLModelBucketRepository
from .category import SQLModelCategoryRepository
from .transaction import SQLModelTransactionRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelBucketRepository",
    "SQLModelCategoryRepository",
    "SQLModelTransactionRepository",
    "SQLModelUserRepository",
]
