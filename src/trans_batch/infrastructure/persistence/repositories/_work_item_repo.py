# src/trans_batch/infrastructure/persistence/repositories/_work_item_repo.py
"""工作条目仓库：认领、结果写回与查询。"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import or_, select, update

from trans_batch.core.types import ItemKind, TranslationOutcome, WorkItem
from trans_batch.infrastructure.db._schema import TbWorkItem

from ._base_repo import BaseRepository, store_operation


class SqlAlchemyWorkItemRepository(BaseRepository):
    """工作条目仓库实现。"""

    @store_operation("claim pending items")
    async def claim_pending(
        self,
        token: str,
        run_id: str,
        *,
        lease_seconds: int,
        scope: ItemKind | None = None,
    ) -> list[WorkItem]:
        """
        原子地认领令牌下所有未完成、且未被认领（或租约已过期）的条目，
        并按存储顺序返回本次运行认领到的条目。
        """
        now = datetime.now(timezone.utc)
        conditions = [
            TbWorkItem.token == token,
            TbWorkItem.completed.is_(False),
            or_(TbWorkItem.claimed_by.is_(None), TbWorkItem.claim_expires_at < now),
        ]
        if scope is not None:
            conditions.append(TbWorkItem.kind == scope.value)

        await self._session.execute(
            update(TbWorkItem)
            .where(*conditions)
            .values(
                claimed_by=run_id,
                claim_expires_at=now + timedelta(seconds=lease_seconds),
            )
            .execution_options(synchronize_session=False)
        )

        stmt = (
            select(TbWorkItem)
            .where(
                TbWorkItem.token == token,
                TbWorkItem.claimed_by == run_id,
                TbWorkItem.completed.is_(False),
            )
            .order_by(TbWorkItem.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [WorkItem.from_orm_model(r) for r in rows]

    @store_operation("renew item claim")
    async def renew_claim(self, item_id: int, run_id: str, *, lease_seconds: int) -> bool:
        """
        在处理条目前延长本次运行对它的租约。

        返回 False 表示条目已完成，或认领已被其他运行接管，调用方不应再处理它。
        """
        result = await self._session.execute(
            update(TbWorkItem)
            .where(
                TbWorkItem.id == item_id,
                TbWorkItem.completed.is_(False),
                TbWorkItem.claimed_by == run_id,
            )
            .values(
                claim_expires_at=datetime.now(timezone.utc)
                + timedelta(seconds=lease_seconds)
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @store_operation("record item outcome")
    async def record_outcome(
        self, item_id: int, outcome: TranslationOutcome, run_id: str
    ) -> bool:
        """
        写回单个条目的处理结果并释放认领。

        只更新仍由本次运行持有且尚未完成的行，因此重复写入不会改变已完成的条目。
        返回是否有行被更新。
        """
        values: dict[str, Any] = {
            "outcome_note": outcome.outcome_note,
            "claimed_by": None,
            "claim_expires_at": None,
        }
        if outcome.succeeded:
            values["completed"] = True
            values["completed_at"] = datetime.now(timezone.utc)
            if outcome.translated_content is not None or not outcome.skipped:
                values["output_content"] = outcome.translated_content
        else:
            values["attempts"] = TbWorkItem.attempts + 1

        result = await self._session.execute(
            update(TbWorkItem)
            .where(
                TbWorkItem.id == item_id,
                TbWorkItem.completed.is_(False),
                TbWorkItem.claimed_by == run_id,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @store_operation("release claims")
    async def release_claims(self, run_id: str) -> int:
        result = await self._session.execute(
            update(TbWorkItem)
            .where(TbWorkItem.claimed_by == run_id)
            .values(claimed_by=None, claim_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    @store_operation("list items")
    async def list_items(self, token: str) -> list[WorkItem]:
        rows = (
            (
                await self._session.execute(
                    select(TbWorkItem)
                    .where(TbWorkItem.token == token)
                    .order_by(TbWorkItem.id)
                )
            )
            .scalars()
            .all()
        )
        return [WorkItem.from_orm_model(r) for r in rows]
