# tests/integration/application/test_change_detector.py
"""
测试 ChangeDetector 的判定顺序、快照维护与失败放行行为。
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from sqlalchemy import select

from trans_batch.application.change_detector import ChangeDetector
from trans_batch.core.exceptions import StoreError
from trans_batch.domain.normalization import content_digest, normalize_text
from trans_batch.infrastructure.db._schema import TbChangeSnapshot
from trans_batch.infrastructure.extraction import DocumentTextExtractor

pytestmark = [pytest.mark.db]


@pytest.fixture
def detector(uow_factory) -> ChangeDetector:
    return ChangeDetector(uow_factory, DocumentTextExtractor())


@pytest.fixture
def document(source_dir: Path) -> Path:
    path = source_dir / "manual.txt"
    path.write_text("Installation Guide\n\nStep 1", encoding="utf-8")
    return path


async def _record_counterpart(uow_factory, key: str = "manual", lang: str = "fr") -> None:
    async with uow_factory() as uow:
        await uow.counterparts.upsert(key, lang, "/out/manual_fr.txt")


async def _snapshot_rows(sessionmaker) -> list[TbChangeSnapshot]:
    async with sessionmaker() as session:
        return list((await session.execute(select(TbChangeSnapshot))).scalars().all())


class TestChangeDetector:
    @pytest.mark.asyncio
    async def test_no_counterpart_requires_translation_and_stores_snapshot(
        self, detector, document, sessionmaker
    ):
        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is True
        assert decision.reason == "no translated counterpart"
        (snapshot,) = await _snapshot_rows(sessionmaker)
        assert snapshot.document_key == "manual"
        assert snapshot.content == document.read_bytes()
        assert snapshot.source_suffix == ".txt"
        assert snapshot.normalized_digest == content_digest(
            normalize_text(document.read_text(encoding="utf-8"))
        )

    @pytest.mark.asyncio
    async def test_counterpart_without_snapshot_requires_translation(
        self, detector, document, uow_factory
    ):
        await _record_counterpart(uow_factory)

        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is True
        assert decision.reason == "no previous snapshot"

    @pytest.mark.asyncio
    async def test_counterpart_for_other_language_does_not_count(
        self, detector, document, uow_factory
    ):
        await _record_counterpart(uow_factory, lang="de")
        await detector.should_translate("manual", document, "fr")

        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is True

    @pytest.mark.asyncio
    async def test_whitespace_and_case_only_changes_are_unchanged(
        self, detector, document, uow_factory, sessionmaker
    ):
        await _record_counterpart(uow_factory)
        await detector.should_translate("manual", document, "fr")
        document.write_text("  installation   GUIDE step 1 ", encoding="utf-8")

        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is False
        assert decision.counterpart_ref == "/out/manual_fr.txt"
        (snapshot,) = await _snapshot_rows(sessionmaker)
        assert snapshot.content == b"  installation   GUIDE step 1 "

    @pytest.mark.asyncio
    async def test_content_change_requires_translation(
        self, detector, document, uow_factory
    ):
        await _record_counterpart(uow_factory)
        await detector.should_translate("manual", document, "fr")
        document.write_text("Installation Guide\n\nStep 2", encoding="utf-8")

        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is True
        assert decision.reason == "content changed"

    @pytest.mark.asyncio
    async def test_extraction_failure_fails_open(
        self, uow_factory, document, sessionmaker
    ):
        await _record_counterpart(uow_factory)
        extractor = Mock()
        extractor.extract.return_value = "Installation Guide Step 1"
        detector = ChangeDetector(uow_factory, extractor)
        await detector.should_translate("manual", document, "fr")
        extractor.extract.side_effect = ValueError("corrupt document")

        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is True
        assert decision.reason == "extraction failed"
        (snapshot,) = await _snapshot_rows(sessionmaker)
        assert snapshot.normalized_digest is None

    @pytest.mark.asyncio
    async def test_store_failure_fails_open(self, document):
        failing_uow = MagicMock()
        failing_uow.__aenter__ = AsyncMock(side_effect=StoreError("database is locked"))
        detector = ChangeDetector(lambda: failing_uow, DocumentTextExtractor())

        decision = await detector.should_translate("manual", document, "fr")

        assert decision.should_translate is True
        assert decision.reason == "lookup failed"
