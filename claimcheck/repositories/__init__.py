"""
Repository factory for verification storage.
Provides centralized access to repository instances.
"""

from typing import Optional

from .interfaces import VerificationRepositoryInterface
from .sqlite_impl import SQLiteVerificationRepository


class RepositoryFactory:
    """Factory for creating repository instances."""

    def __init__(self, db_path: str = ":memory:", connection_factory=None):
        """Initialize with a database path and optional connection factory."""
        self._db_path = db_path
        self._connection_factory = connection_factory
        self._verification_repo: Optional[VerificationRepositoryInterface] = None

    def get_verification_repository(self) -> VerificationRepositoryInterface:
        """Get verification repository instance."""
        if self._verification_repo is None:
            self._verification_repo = SQLiteVerificationRepository(self._db_path, self._connection_factory)
        return self._verification_repo


def create_verification_repository(db_path: Optional[str] = None) -> VerificationRepositoryInterface:
    """Build a SQLite verification repository for ``db_path`` (in-memory when omitted)."""
    return RepositoryFactory(db_path or ":memory:").get_verification_repository()


__all__ = [
    'RepositoryFactory',
    'SQLiteVerificationRepository',
    'VerificationRepositoryInterface',
    'create_verification_repository',
]
