# src/trans_batch/infrastructure/persistence/repositories/_outbox_repo.py
"""事务性发件箱仓库的 SQLAlchemy 实现。"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from trans_batch.infrastructure.db._schema import TbOutboxEvent

from ._base_repo import BaseRepository, store_operation


class SqlAlchemyOutboxRepository(BaseRepository):
    """发件箱仓库实现。事件与条目结果在同一事务中写入。"""

    @store_operation("add outbox event")
    async def add(self, *, event_id: str, topic: str, payload: dict[str, Any]) -> None:
        self._session.add(TbOutboxEvent(topic=topic, payload=payload, event_id=event_id))

    @store_operation("list pending outbox events")
    async def list_pending(self, topic: str | None = None) -> list[TbOutboxEvent]:
        stmt = select(TbOutboxEvent).where(TbOutboxEvent.status == "pending")
        if topic is not None:
            stmt = stmt.where(TbOutboxEvent.topic == topic)
        result = await self._session.execute(stmt.order_by(TbOutboxEvent.created_at))
        return list(result.scalars().all())
