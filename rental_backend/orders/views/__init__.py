# orders/views/__init__.py

from .clean_return import ConfirmCleanReturnView

__all__ = [
    "ConfirmCleanReturnView",
]
