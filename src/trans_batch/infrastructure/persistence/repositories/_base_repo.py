# src/trans_batch/infrastructure/persistence/repositories/_base_repo.py
from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from trans_batch.core.exceptions import StoreError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_R = TypeVar("_R")


def store_operation(
    operation: str,
) -> Callable[[Callable[..., Awaitable[_R]]], Callable[..., Awaitable[_R]]]:
    """将 SQLAlchemy 异常统一转换为 StoreError。"""

    def decorator(func: Callable[..., Awaitable[_R]]) -> Callable[..., Awaitable[_R]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> _R:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                raise StoreError(f"{operation} failed: {e}") from e

        return wrapper

    return decorator


class BaseRepository:
    """所有 SQLAlchemy 仓库的基类。"""

    def __init__(self, session: "AsyncSession"):
        self._session = session

    def _get_insert_stmt(self):
        """根据当前会话的方言，返回支持 upsert 的 insert 函数。"""
        if self._session.bind.dialect.name == "postgresql":
            return pg_insert
        return sqlite_insert
