from inventory_api.database.base import Base
from inventory_api.database.engine import create_schema, engine
from inventory_api.database.session import SessionLocal, session_scope

__all__ = ["Base", "SessionLocal", "create_schema", "engine", "session_scope"]
