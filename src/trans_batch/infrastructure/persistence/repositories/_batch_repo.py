# src/trans_batch/infrastructure/persistence/repositories/_batch_repo.py
"""批次令牌与批次配置的只读仓库。"""

from __future__ import annotations

from sqlalchemy import exists, select

from trans_batch.core.types import BatchConfig, ItemKind
from trans_batch.infrastructure.db._schema import TbBatchConfig, TbWorkItem

from ._base_repo import BaseRepository, store_operation


class SqlAlchemyBatchRepository(BaseRepository):
    """批次仓库实现。"""

    @store_operation("token lookup")
    async def token_has_items(self, token: str, scope: ItemKind | None) -> bool:
        condition = TbWorkItem.token == token
        if scope is not None:
            condition = condition & (TbWorkItem.kind == scope.value)
        result = await self._session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    @store_operation("fetch batch config")
    async def fetch_config(self, token: str) -> BatchConfig | None:
        stmt = (
            select(TbBatchConfig)
            .join(TbWorkItem, TbWorkItem.config_id == TbBatchConfig.id)
            .where(TbWorkItem.token == token, TbBatchConfig.active.is_(True))
            .order_by(TbWorkItem.id)
            .limit(1)
        )
        row = (await self._session.execute(stmt)).scalars().first()
        if row is None:
            return None
        return BatchConfig(
            config_id=row.id,
            vendor_name=row.vendor_name,
            credentials=dict(row.credentials or {}),
            on_complete_hook=row.on_complete_hook,
        )
