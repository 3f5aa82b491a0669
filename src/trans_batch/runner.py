# src/trans_batch/runner.py
"""
批次运行入口。

`run_batch` 是调度器或 CLI 调用的唯一入口。数据库引擎的所有权是显式的：
- 未传入 `db_engine` 时，函数自行创建引擎并在结束时释放；
- 传入 `db_engine` 时默认只借用，只有 `owns_engine=True` 才会在结束时释放。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from dependency_injector import providers

from trans_batch.bootstrap import create_container
from trans_batch.core.types import BatchSummary, ItemKind
from trans_batch.infrastructure.db import dispose_engine

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from trans_batch.config import TransBatchConfig

logger = structlog.get_logger(__name__)


async def run_batch(
    token: str,
    *,
    config: "TransBatchConfig",
    scope: ItemKind | None = None,
    db_engine: "AsyncEngine | None" = None,
    owns_engine: bool = False,
) -> BatchSummary:
    """运行一个批次并返回汇总计数。致命错误原样抛出。"""
    container = create_container(config)
    if db_engine is not None:
        container.db_engine.override(providers.Object(db_engine))
    else:
        owns_engine = True

    engine = container.db_engine()
    try:
        orchestrator = container.orchestrator()
        return await orchestrator.run_batch(token, scope)
    finally:
        if owns_engine:
            await dispose_engine(engine)
            logger.debug("数据库引擎已释放。")
