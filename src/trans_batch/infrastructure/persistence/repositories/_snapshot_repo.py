# src/trans_batch/infrastructure/persistence/repositories/_snapshot_repo.py
"""文档快照与译文对应物仓库的 SQLAlchemy 实现。"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select

from trans_batch.core.types import ChangeSnapshot
from trans_batch.infrastructure.db._schema import TbChangeSnapshot, TbTranslatedDocument

from ._base_repo import BaseRepository, store_operation


class SqlAlchemySnapshotRepository(BaseRepository):
    """变更快照仓库实现。每个 document_key 至多一行。"""

    @store_operation("fetch change snapshot")
    async def get(self, document_key: str) -> ChangeSnapshot | None:
        row = (
            await self._session.execute(
                select(TbChangeSnapshot).where(
                    TbChangeSnapshot.document_key == document_key
                )
            )
        ).scalar_one_or_none()
        return ChangeSnapshot.model_validate(row, from_attributes=True) if row else None

    @store_operation("upsert change snapshot")
    async def upsert(
        self,
        document_key: str,
        content: bytes,
        *,
        source_suffix: str,
        normalized_digest: str | None,
    ) -> None:
        insert = self._get_insert_stmt()
        values = {
            "content": content,
            "source_suffix": source_suffix,
            "normalized_digest": normalized_digest,
            "checked_at": datetime.now(timezone.utc),
        }
        stmt = (
            insert(TbChangeSnapshot)
            .values(document_key=document_key, **values)
            .on_conflict_do_update(index_elements=["document_key"], set_=values)
        )
        await self._session.execute(stmt)


class SqlAlchemyCounterpartRepository(BaseRepository):
    """已生成译文文档的仓库实现。"""

    @store_operation("fetch translated counterpart")
    async def get_ref(self, document_key: str, target_language: str) -> str | None:
        return (
            await self._session.execute(
                select(TbTranslatedDocument.output_ref).where(
                    TbTranslatedDocument.document_key == document_key,
                    TbTranslatedDocument.target_language == target_language,
                )
            )
        ).scalar_one_or_none()

    @store_operation("upsert translated counterpart")
    async def upsert(
        self, document_key: str, target_language: str, output_ref: str
    ) -> None:
        insert = self._get_insert_stmt()
        values = {"output_ref": output_ref, "updated_at": datetime.now(timezone.utc)}
        stmt = (
            insert(TbTranslatedDocument)
            .values(document_key=document_key, target_language=target_language, **values)
            .on_conflict_do_update(
                index_elements=["document_key", "target_language"], set_=values
            )
        )
        await self._session.execute(stmt)
