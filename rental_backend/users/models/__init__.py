# users/models/__init__.py

from .bank_account import BankAccount
from .user import User

__all__ = [
    "User",
    "BankAccount",
]
