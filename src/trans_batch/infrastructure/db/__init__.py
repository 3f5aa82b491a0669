# src/trans_batch/infrastructure/db/__init__.py
"""数据库引擎、会话与 ORM 模型。"""

from .base import Base, metadata
from .engine import create_async_db_engine
from .session import create_async_sessionmaker, create_schema, dispose_engine

__all__ = [
    "Base",
    "metadata",
    "create_async_db_engine",
    "create_async_sessionmaker",
    "create_schema",
    "dispose_engine",
]
