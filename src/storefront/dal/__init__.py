"""
Data Access Layer (DAL) for the storefront service.

The process keeps a single ``Database`` (engine plus connection pool) which
is created lazily on first use, shared by every service and disposed when
the process exits.
"""

import atexit
from typing import Optional

from storefront.dal.db_handler import Database, UnitOfWork

_database: Optional[Database] = None


def get_database() -> Database:
    """
    Get the process wide database handle.

    Returns:
        Shared Database instance
    """
    global _database
    if _database is None:
        _database = Database()
        atexit.register(_database.dispose)
    return _database


__all__ = [
    'Database',
    'UnitOfWork',
    'get_database',
]
