# src/trans_batch/infrastructure/uow.py
"""
SQLAlchemy 单元工作 (Unit of Work) 的具体实现。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from sqlalchemy.exc import SQLAlchemyError

from trans_batch.core.exceptions import StoreError
from trans_batch.core.uow import IUnitOfWork

from .persistence.repositories import (
    SqlAlchemyBatchRepository,
    SqlAlchemyCounterpartRepository,
    SqlAlchemyOutboxRepository,
    SqlAlchemySnapshotRepository,
    SqlAlchemyWorkItemRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """SQLAlchemy UoW 实现：正常退出时提交，异常退出时回滚。"""

    def __init__(self, sessionmaker: "async_sessionmaker[AsyncSession]"):
        self._sessionmaker = sessionmaker
        self.session: "AsyncSession"

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._sessionmaker()
        self.batches = SqlAlchemyBatchRepository(self.session)
        self.work_items = SqlAlchemyWorkItemRepository(self.session)
        self.snapshots = SqlAlchemySnapshotRepository(self.session)
        self.counterparts = SqlAlchemyCounterpartRepository(self.session)
        self.outbox = SqlAlchemyOutboxRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"commit failed: {e}") from e

    async def rollback(self) -> None:
        await self.session.rollback()


# 类型别名，用于依赖注入
UowFactory = Callable[[], IUnitOfWork]
