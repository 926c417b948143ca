# disputes/models/__init__.py

from .issue_resolution import IssueResolution

__all__ = [
    "IssueResolution",
]
