"""SQLModel table exports."""

from .bucket import Bucket
from .category import Category
from .transaction import Transaction
from .user import User

__all__ = [
    "Bucket",
    "Category",
    "Transaction",
    "User",
]
