# src/trans_batch/application/orchestrator.py
"""
批次编排器：驱动一个批次从认证到完成的整个生命周期。

状态流转：created -> authenticated -> provider_resolved -> processing -> completed，
任何阶段的致命错误都会进入 aborted 并向调用方抛出。

条目逐个顺序处理。单个条目的失败只记录在该条目上，不影响其他条目；
结果写回失败时记录日志并在汇总中标记，批次继续。
每个条目处理前在独立事务中续租；认领已被其他运行接管的条目直接跳过，不计入汇总。
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

import structlog

from trans_batch.core.exceptions import (
    AuthenticationDenied,
    ErrorKind,
    InvalidArgument,
    NoRecordsFound,
    StoreError,
    TransBatchError,
)
from trans_batch.core.types import (
    BatchConfig,
    BatchState,
    BatchSummary,
    ItemKind,
    TranslationOutcome,
    WorkItem,
)

if TYPE_CHECKING:
    from pathlib import Path

    from trans_batch.adapters.providers.base import BaseTranslationProvider
    from trans_batch.application.authenticator import TokenAuthenticator
    from trans_batch.application.change_detector import ChangeDetector
    from trans_batch.config import TransBatchConfig
    from trans_batch.infrastructure.storage import BatchStorage
    from trans_batch.infrastructure.uow import UowFactory

    ProviderFactory = Callable[..., BaseTranslationProvider[Any]]

logger = structlog.get_logger(__name__)


class _PersistResult(Enum):
    STORED = "stored"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class BatchRun:
    """一次批次运行的状态记录。"""

    token: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: BatchState = BatchState.CREATED

    def transition(self, new_state: BatchState, **details: Any) -> None:
        logger.info(
            "批次状态变更。",
            from_state=self.state.value,
            to_state=new_state.value,
            **details,
        )
        self.state = new_state


class BatchOrchestrator:
    """批次编排器。借用 UoW 工厂，不拥有数据库引擎。"""

    def __init__(
        self,
        config: "TransBatchConfig",
        uow_factory: "UowFactory",
        authenticator: "TokenAuthenticator",
        change_detector: "ChangeDetector",
        storage: "BatchStorage",
        provider_factory: "ProviderFactory",
    ):
        self._config = config
        self._uow_factory = uow_factory
        self._authenticator = authenticator
        self._change_detector = change_detector
        self._storage = storage
        self._provider_factory = provider_factory

    async def run_batch(
        self, token: str, scope: ItemKind | None = None
    ) -> BatchSummary:
        """
        处理令牌下的全部待处理条目并返回汇总。

        Raises:
            AuthenticationDenied: 令牌未通过认证（此时不会读取任何条目）。
            NoRecordsFound: 令牌下没有批次配置。
            UnsupportedProvider: 配置中的供应商无法识别。
            ConfigurationError: 供应商设置或凭据无效。
            StoreError: 建立阶段的存储错误。
        """
        run = BatchRun(token=token)
        structlog.contextvars.bind_contextvars(token=token, run_id=run.run_id)
        try:
            return await self._run(run, scope)
        except Exception as e:
            kind = e.kind.value if isinstance(e, TransBatchError) else ErrorKind.UNEXPECTED.value
            run.transition(BatchState.ABORTED, error_kind=kind, error=str(e))
            raise
        finally:
            structlog.contextvars.unbind_contextvars("token", "run_id")

    async def _run(self, run: BatchRun, scope: ItemKind | None) -> BatchSummary:
        if not await self._authenticator.is_authorized(run.token, scope):
            raise AuthenticationDenied("batch token is not authorized")
        run.transition(BatchState.AUTHENTICATED)

        async with self._uow_factory() as uow:
            batch_config = await uow.batches.fetch_config(run.token)
        if batch_config is None:
            raise NoRecordsFound("no batch configuration for token")

        async with AsyncExitStack() as stack:
            staging_dir = stack.enter_context(
                self._storage.staging_area(run.token, run.run_id)
            )
            provider = self._provider_factory(
                batch_config, self._config, staging_dir=staging_dir
            )
            stack.push_async_callback(provider.close)
            run.transition(BatchState.PROVIDER_RESOLVED, provider=provider.name())

            stack.push_async_callback(self._release_claims, run.run_id)
            async with self._uow_factory() as uow:
                items = await uow.work_items.claim_pending(
                    run.token,
                    run.run_id,
                    lease_seconds=self._config.claim_lease_seconds,
                    scope=scope,
                )
            run.transition(BatchState.PROCESSING, pending=len(items))

            summary = BatchSummary(run_id=run.run_id)
            for item in items:
                if not await self._renew_claim(item, run):
                    continue
                outcome = await self._process_item(item, provider, run)
                result = await self._persist_outcome(item, outcome, batch_config, run)
                if result is _PersistResult.REJECTED:
                    continue
                summary.record(outcome)
                if result is _PersistResult.FAILED:
                    summary.unpersisted.append(item.id)

            run.transition(
                BatchState.COMPLETED,
                processed=summary.processed,
                succeeded=summary.succeeded,
                failed=summary.failed,
                skipped=summary.skipped,
                unpersisted=len(summary.unpersisted),
            )
            return summary

    async def _process_item(
        self,
        item: WorkItem,
        provider: "BaseTranslationProvider[Any]",
        run: BatchRun,
    ) -> TranslationOutcome:
        log = logger.bind(
            item_id=item.id, kind=item.kind.value, target_language=item.target_language
        )
        try:
            if item.kind is ItemKind.DOCUMENT:
                outcome = await self._process_document(item, provider, run)
            else:
                translated = await provider.translate_text(
                    item.source_content, item.target_language
                )
                outcome = TranslationOutcome(
                    item_id=item.id, succeeded=True, translated_content=translated
                )
        except TransBatchError as e:
            log.warning("条目处理失败。", error_kind=e.kind.value, error=str(e))
            return TranslationOutcome(
                item_id=item.id,
                succeeded=False,
                error_kind=e.kind,
                error_detail=str(e),
                is_retryable=e.is_retryable,
            )
        except Exception as e:
            log.error("条目处理时发生未预期的异常。", exc_info=True)
            return TranslationOutcome(
                item_id=item.id,
                succeeded=False,
                error_kind=ErrorKind.UNEXPECTED,
                error_detail=str(e) or type(e).__name__,
                is_retryable=True,
            )
        log.info("条目处理完成。", skipped=outcome.skipped)
        return outcome

    async def _process_document(
        self,
        item: WorkItem,
        provider: "BaseTranslationProvider[Any]",
        run: BatchRun,
    ) -> TranslationOutcome:
        source_path: Path = self._storage.resolve_source(item.source_content)
        if not source_path.is_file():
            raise InvalidArgument(f"source document not found: {source_path}")

        decision = await self._change_detector.should_translate(
            item.effective_document_key, source_path, item.target_language
        )
        if not decision.should_translate:
            return TranslationOutcome(
                item_id=item.id,
                succeeded=True,
                skipped=True,
                translated_content=decision.counterpart_ref,
            )

        staged = await provider.translate_document(source_path, item.target_language)
        published = await asyncio.to_thread(
            self._storage.publish,
            staged,
            source=source_path,
            target_language=item.target_language,
            token=run.token,
        )
        return TranslationOutcome(
            item_id=item.id, succeeded=True, translated_content=str(published)
        )

    async def _renew_claim(self, item: WorkItem, run: BatchRun) -> bool:
        """处理条目前续租；认领已不属于本次运行时跳过该条目。"""
        try:
            async with self._uow_factory() as uow:
                held = await uow.work_items.renew_claim(
                    item.id,
                    run.run_id,
                    lease_seconds=self._config.claim_lease_seconds,
                )
        except StoreError:
            logger.warning("条目续租失败，留待后续运行处理。", item_id=item.id, exc_info=True)
            return False
        if not held:
            logger.warning("条目认领已被接管或条目已完成，跳过。", item_id=item.id)
        return held

    async def _persist_outcome(
        self,
        item: WorkItem,
        outcome: TranslationOutcome,
        batch_config: BatchConfig,
        run: BatchRun,
    ) -> _PersistResult:
        """
        写回条目结果；译文对应物与 on-complete 事件在同一事务中写入。

        认领已失效（条目被其他运行接管或已完成）时返回 REJECTED，该结果不计入汇总。
        """
        try:
            async with self._uow_factory() as uow:
                updated = await uow.work_items.record_outcome(
                    item.id, outcome, run.run_id
                )
                if not updated:
                    logger.warning(
                        "条目已完成或认领已失效，结果未写入。", item_id=item.id
                    )
                    return _PersistResult.REJECTED
                if (
                    item.kind is ItemKind.DOCUMENT
                    and outcome.succeeded
                    and not outcome.skipped
                    and outcome.translated_content
                ):
                    await uow.counterparts.upsert(
                        item.effective_document_key,
                        item.target_language,
                        outcome.translated_content,
                    )
                if batch_config.on_complete_hook:
                    await uow.outbox.add(
                        event_id=f"{run.run_id}:{item.id}",
                        topic=batch_config.on_complete_hook,
                        payload=self._completion_payload(item, outcome, run),
                    )
        except StoreError:
            logger.error(
                "条目结果持久化失败，需要人工处理。", item_id=item.id, exc_info=True
            )
            return _PersistResult.FAILED
        return _PersistResult.STORED

    @staticmethod
    def _completion_payload(
        item: WorkItem, outcome: TranslationOutcome, run: BatchRun
    ) -> dict[str, Any]:
        return {
            "token": run.token,
            "run_id": run.run_id,
            "item_id": item.id,
            "kind": item.kind.value,
            "target_language": item.target_language,
            "succeeded": outcome.succeeded,
            "skipped": outcome.skipped,
            "output_content": outcome.translated_content,
            "outcome_note": outcome.outcome_note,
        }

    async def _release_claims(self, run_id: str) -> None:
        try:
            async with self._uow_factory() as uow:
                released = await uow.work_items.release_claims(run_id)
        except StoreError:
            logger.warning("释放条目认领失败，将等待租约过期。", exc_info=True)
            return
        if released:
            logger.info("已释放剩余的条目认领。", released=released)
