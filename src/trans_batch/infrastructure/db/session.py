# src/trans_batch/infrastructure/db/session.py
"""
会话工厂与 Schema 管理。
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .base import metadata


def create_async_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """基于引擎创建 AsyncSession 工厂。"""
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


async def create_schema(engine: AsyncEngine) -> None:
    """按 ORM 元数据创建所有缺失的表。"""
    from . import _schema  # noqa: F401  # 注册所有 ORM 模型

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """释放引擎持有的连接池。"""
    await engine.dispose()
