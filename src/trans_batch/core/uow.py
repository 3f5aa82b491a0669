# src/trans_batch/core/uow.py
"""
定义了持久层的仓库协议与单元工作 (Unit of Work) 协议。

应用层只依赖这里的协议，具体实现位于 `trans_batch.infrastructure`。
"""

from __future__ import annotations

from typing import Any, Protocol

from .types import BatchConfig, ChangeSnapshot, ItemKind, TranslationOutcome, WorkItem


class IBatchRepository(Protocol):
    async def token_has_items(self, token: str, scope: ItemKind | None) -> bool: ...

    async def fetch_config(self, token: str) -> BatchConfig | None: ...


class IWorkItemRepository(Protocol):
    async def claim_pending(
        self,
        token: str,
        run_id: str,
        *,
        lease_seconds: int,
        scope: ItemKind | None = None,
    ) -> list[WorkItem]: ...

    async def renew_claim(
        self, item_id: int, run_id: str, *, lease_seconds: int
    ) -> bool: ...

    async def record_outcome(
        self, item_id: int, outcome: TranslationOutcome, run_id: str
    ) -> bool: ...

    async def release_claims(self, run_id: str) -> int: ...

    async def list_items(self, token: str) -> list[WorkItem]: ...


class ISnapshotRepository(Protocol):
    async def get(self, document_key: str) -> ChangeSnapshot | None: ...

    async def upsert(
        self,
        document_key: str,
        content: bytes,
        *,
        source_suffix: str,
        normalized_digest: str | None,
    ) -> None: ...


class ICounterpartRepository(Protocol):
    async def get_ref(self, document_key: str, target_language: str) -> str | None: ...

    async def upsert(
        self, document_key: str, target_language: str, output_ref: str
    ) -> None: ...


class IOutboxRepository(Protocol):
    async def add(self, *, event_id: str, topic: str, payload: dict[str, Any]) -> None: ...

    async def list_pending(self, topic: str | None = None) -> list[Any]: ...


class IUnitOfWork(Protocol):
    batches: IBatchRepository
    work_items: IWorkItemRepository
    snapshots: ISnapshotRepository
    counterparts: ICounterpartRepository
    outbox: IOutboxRepository

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
