"""Database access: connection scope, ORM table and migrations."""

from schema_probe.state.database import connection_scope, get_engine
from schema_probe.state.tables import Base, UserTable

__all__ = [
    "Base",
    "UserTable",
    "connection_scope",
    "get_engine",
]
