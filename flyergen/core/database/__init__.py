"""
Centralized database layer for FlyerGen.

Structure:
- entities/: Database entity models organized by table
- repositories/: Data access layer organized by table
- session.py: Global engine and session factory management
- utils.py: Database utility functions (engine, session factory, health)
"""

from .base import Base
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
)
from .utils import (
    check_database_health,
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "Base",
    "async_session_maker",
    "check_database_health",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
]
