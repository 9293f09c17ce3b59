"""
Exception types shared by the directory, ledgers and relation indexes.
"""

from typing import List, Optional


class StorageAccessError(Exception):
    """Raised when the key-value store cannot be read, written or parsed."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class ValidationError(ValueError):
    """Raised when input breaks a domain rule. Never swallowed."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
