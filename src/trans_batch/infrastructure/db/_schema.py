# src/trans_batch/infrastructure/db/_schema.py
"""
定义了 trans-batch 持久化所需的 SQLAlchemy ORM 模型。

- batch_configs      ：每个批次的供应商与凭据配置
- work_items         ：待翻译条目（带认领租约列）
- change_snapshots   ：文档内容快照，每个 document_key 至多一行
- translated_documents：已生成的译文文档（变更检测的“下游对应物”）
- outbox             ：事务性发件箱，承载 on-complete 钩子事件
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base

# PostgreSQL 使用 JSONB；其余方言使用通用 JSON
json_type = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TbBatchConfig(Base):
    __tablename__ = "batch_configs"

    vendor_name: Mapped[str] = mapped_column(Text, nullable=False)
    credentials: Mapped[dict[str, Any]] = mapped_column(
        json_type, nullable=False, default_factory=dict
    )
    on_complete_hook: Mapped[str | None] = mapped_column(
        Text, nullable=True, default=None
    )
    active: Mapped[bool] = mapped_column(
        Boolean, server_default="1", nullable=False, default=True
    )
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, init=False
    )


class TbWorkItem(Base):
    __tablename__ = "work_items"

    token: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    config_id: Mapped[int] = mapped_column(
        ForeignKey("batch_configs.id", ondelete="RESTRICT"), nullable=False
    )
    kind: Mapped[str] = mapped_column(Text, nullable=False)
    source_content: Mapped[str] = mapped_column(Text, nullable=False)
    target_language: Mapped[str] = mapped_column(Text, nullable=False)
    document_key: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    completed: Mapped[bool] = mapped_column(
        Boolean, server_default="0", nullable=False, default=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    output_content: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    outcome_note: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    attempts: Mapped[int] = mapped_column(
        Integer, server_default="0", nullable=False, default=0
    )
    claimed_by: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    claim_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, init=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default_factory=_utcnow,
        init=False,
    )

    __table_args__ = (
        Index("ix_work_items_token_completed", "token", "completed"),
    )


class TbChangeSnapshot(Base):
    __tablename__ = "change_snapshots"

    document_key: Mapped[str] = mapped_column(Text, primary_key=True)
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    source_suffix: Mapped[str] = mapped_column(Text, nullable=False, default="")
    normalized_digest: Mapped[str | None] = mapped_column(
        Text, nullable=True, default=None
    )
    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default_factory=_utcnow
    )


class TbTranslatedDocument(Base):
    __tablename__ = "translated_documents"

    document_key: Mapped[str] = mapped_column(Text, primary_key=True)
    target_language: Mapped[str] = mapped_column(Text, primary_key=True)
    output_ref: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default_factory=_utcnow
    )


class TbOutboxEvent(Base):
    """事务性发件箱表。"""

    __tablename__ = "outbox"

    topic: Mapped[str] = mapped_column(Text, index=True, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(json_type, nullable=False)
    event_id: Mapped[str] = mapped_column(Text, nullable=False)
    id: Mapped[str] = mapped_column(
        Text, primary_key=True, default_factory=lambda: str(uuid.uuid4()), init=False
    )
    status: Mapped[str] = mapped_column(
        Text,
        server_default="pending",
        index=True,
        nullable=False,
        default="pending",
        init=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
        default_factory=_utcnow,
        init=False,
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, init=False
    )
