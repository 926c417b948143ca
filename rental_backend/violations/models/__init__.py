# violations/models/__init__.py

from .evidence import ViolationEvidence
from .violation import OPEN_STATUSES, RentalViolation

__all__ = [
    "OPEN_STATUSES",
    "RentalViolation",
    "ViolationEvidence",
]
