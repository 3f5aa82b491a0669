# tests/helpers/factories.py
"""
测试数据工厂：直接通过 ORM 写入批次配置与工作条目。
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trans_batch.infrastructure.db._schema import TbBatchConfig, TbWorkItem


def new_token() -> str:
    return str(uuid.uuid4())


def text_item(source: str, target_language: str = "de") -> dict[str, Any]:
    return {"kind": "text", "source_content": source, "target_language": target_language}


def document_item(
    path: str, target_language: str = "de", document_key: str | None = None
) -> dict[str, Any]:
    return {
        "kind": "document",
        "source_content": path,
        "target_language": target_language,
        "document_key": document_key,
    }


async def seed_batch(
    sessionmaker: async_sessionmaker[AsyncSession],
    *,
    token: str,
    items: list[dict[str, Any]],
    vendor_name: str = "vendor_a",
    credentials: dict[str, Any] | None = None,
    on_complete_hook: str | None = None,
    active: bool = True,
) -> list[int]:
    """写入一个批次配置及其条目，返回条目 ID（按插入顺序）。"""
    async with sessionmaker() as session:
        config = TbBatchConfig(
            vendor_name=vendor_name,
            credentials=credentials or {"api_key": "secret"},
            on_complete_hook=on_complete_hook,
            active=active,
        )
        session.add(config)
        await session.flush()
        rows = [TbWorkItem(token=token, config_id=config.id, **spec) for spec in items]
        session.add_all(rows)
        await session.commit()
        return [row.id for row in rows]


async def load_item(
    sessionmaker: async_sessionmaker[AsyncSession], item_id: int
) -> TbWorkItem:
    async with sessionmaker() as session:
        return (
            await session.execute(select(TbWorkItem).where(TbWorkItem.id == item_id))
        ).scalar_one()
