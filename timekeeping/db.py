"""数据库入口，实际实现在 database.connection"""

from .database.connection import engine, get_db, session_scope, Base, SessionLocal

__all__ = ["engine", "get_db", "session_scope", "Base", "SessionLocal"]
