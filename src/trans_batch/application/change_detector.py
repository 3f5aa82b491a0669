# src/trans_batch/application/change_detector.py
"""
文档变更检测。

决定一个文档是否需要重新翻译：
1. 目标语言下不存在已生成的译文 -> 需要翻译；
2. 没有历史快照 -> 需要翻译；
3. 否则提取当前与历史内容的文本并归一化（压缩空白、去首尾空白、转小写），
   完全一致则视为未变化，跳过翻译。

无论结论如何，都会用当前内容覆盖快照。任何查询、提取或比较失败都按“需要翻译”处理。
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from trans_batch.core.exceptions import StoreError
from trans_batch.core.interfaces import TextExtractor
from trans_batch.core.types import ChangeDecision
from trans_batch.domain.normalization import content_digest, normalize_text
from trans_batch.infrastructure.uow import UowFactory

logger = structlog.get_logger(__name__)


class ChangeDetector:
    """基于内容快照的变更检测器。"""

    def __init__(self, uow_factory: UowFactory, extractor: TextExtractor):
        self._uow_factory = uow_factory
        self._extractor = extractor

    async def should_translate(
        self, document_key: str, source_path: Path, target_language: str
    ) -> ChangeDecision:
        log = logger.bind(document_key=document_key, target_language=target_language)
        try:
            current = await asyncio.to_thread(source_path.read_bytes)
        except OSError:
            log.warning("读取源文档失败，按需要翻译处理。", exc_info=True)
            return ChangeDecision(should_translate=True, reason="source unreadable")

        suffix = source_path.suffix
        current_text = await self._normalized_text(current, suffix, log=log)
        decision = await self._decide(
            document_key, target_language, current_text, log=log
        )
        await self._record_snapshot(
            document_key,
            current,
            suffix,
            content_digest(current_text) if current_text is not None else None,
            log=log,
        )
        log.info(
            "变更检测完成。",
            should_translate=decision.should_translate,
            reason=decision.reason,
        )
        return decision

    async def _decide(
        self,
        document_key: str,
        target_language: str,
        current_text: str | None,
        *,
        log: structlog.stdlib.BoundLogger,
    ) -> ChangeDecision:
        try:
            async with self._uow_factory() as uow:
                counterpart_ref = await uow.counterparts.get_ref(
                    document_key, target_language
                )
                snapshot = (
                    await uow.snapshots.get(document_key)
                    if counterpart_ref is not None
                    else None
                )
        except StoreError:
            log.warning("查询历史状态失败，按需要翻译处理。", exc_info=True)
            return ChangeDecision(should_translate=True, reason="lookup failed")

        if counterpart_ref is None:
            return ChangeDecision(should_translate=True, reason="no translated counterpart")
        if snapshot is None:
            return ChangeDecision(should_translate=True, reason="no previous snapshot")
        if current_text is None:
            return ChangeDecision(should_translate=True, reason="extraction failed")

        previous_text = await self._normalized_text(
            snapshot.content, snapshot.source_suffix, log=log
        )
        if previous_text is None:
            return ChangeDecision(should_translate=True, reason="extraction failed")
        if previous_text == current_text:
            return ChangeDecision(
                should_translate=False,
                reason="content unchanged",
                counterpart_ref=counterpart_ref,
            )
        return ChangeDecision(should_translate=True, reason="content changed")

    async def _normalized_text(
        self, data: bytes, suffix: str, *, log: structlog.stdlib.BoundLogger
    ) -> str | None:
        try:
            text = await asyncio.to_thread(self._extractor.extract, data, suffix=suffix)
        except Exception:
            log.warning("文档文本提取失败。", suffix=suffix, exc_info=True)
            return None
        return normalize_text(text)

    async def _record_snapshot(
        self,
        document_key: str,
        content: bytes,
        suffix: str,
        digest: str | None,
        *,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        try:
            async with self._uow_factory() as uow:
                await uow.snapshots.upsert(
                    document_key,
                    content,
                    source_suffix=suffix,
                    normalized_digest=digest,
                )
        except StoreError:
            log.error("更新文档快照失败。", exc_info=True)
