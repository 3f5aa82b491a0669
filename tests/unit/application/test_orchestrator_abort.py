# tests/unit/application/test_orchestrator_abort.py
"""
测试编排器在致命错误下的中止顺序（全部依赖均为模拟对象）。
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from trans_batch.application.orchestrator import BatchOrchestrator, BatchRun
from trans_batch.config import StorageSettings, TransBatchConfig
from trans_batch.core.exceptions import (
    AuthenticationDenied,
    NoRecordsFound,
    StoreError,
    UnsupportedProvider,
)
from trans_batch.core.types import BatchConfig, BatchState
from trans_batch.infrastructure.storage import BatchStorage


def _mock_uow(batch_config: BatchConfig | None = None) -> MagicMock:
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=None)
    uow.batches.fetch_config = AsyncMock(return_value=batch_config)
    uow.work_items.claim_pending = AsyncMock(return_value=[])
    uow.work_items.release_claims = AsyncMock(return_value=0)
    return uow


class TestOrchestratorAbortOrdering:
    """测试致命错误发生时，后续步骤都不会执行。"""

    @pytest.fixture
    def config(self, tmp_path: Path) -> TransBatchConfig:
        return TransBatchConfig(
            storage=StorageSettings(
                staging_root=tmp_path / "staging", output_root=tmp_path / "output"
            )
        )

    @pytest.fixture
    def authenticator(self) -> Mock:
        authenticator = Mock()
        authenticator.is_authorized = AsyncMock(return_value=True)
        return authenticator

    def _build(self, config, authenticator, uow, provider_factory=None):
        return BatchOrchestrator(
            config=config,
            uow_factory=Mock(return_value=uow),
            authenticator=authenticator,
            change_detector=Mock(),
            storage=BatchStorage(config.storage),
            provider_factory=provider_factory or Mock(),
        )

    @pytest.mark.asyncio
    async def test_denied_token_never_touches_the_store(self, config, authenticator):
        """认证失败时不读取配置、不认领条目、不创建适配器。"""
        authenticator.is_authorized.return_value = False
        uow = _mock_uow()
        provider_factory = Mock()
        orchestrator = self._build(config, authenticator, uow, provider_factory)

        with pytest.raises(AuthenticationDenied):
            await orchestrator.run_batch("3f0c8a4e-6f1d-4c55-9a39-0c1c2f6e7b10")

        uow.batches.fetch_config.assert_not_awaited()
        uow.work_items.claim_pending.assert_not_awaited()
        provider_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_config_raises_no_records_found(self, config, authenticator):
        uow = _mock_uow(batch_config=None)
        provider_factory = Mock()
        orchestrator = self._build(config, authenticator, uow, provider_factory)

        with pytest.raises(NoRecordsFound):
            await orchestrator.run_batch("3f0c8a4e-6f1d-4c55-9a39-0c1c2f6e7b10")

        provider_factory.assert_not_called()
        uow.work_items.claim_pending.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_provider_aborts_before_claiming(
        self, config, authenticator
    ):
        uow = _mock_uow(BatchConfig(config_id=1, vendor_name="acme"))
        provider_factory = Mock(side_effect=UnsupportedProvider("acme"))
        orchestrator = self._build(config, authenticator, uow, provider_factory)

        with pytest.raises(UnsupportedProvider):
            await orchestrator.run_batch("3f0c8a4e-6f1d-4c55-9a39-0c1c2f6e7b10")

        uow.work_items.claim_pending.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_error_during_setup_propagates(self, config, authenticator):
        authenticator.is_authorized.side_effect = StoreError("connection refused")
        orchestrator = self._build(config, authenticator, _mock_uow())

        with pytest.raises(StoreError):
            await orchestrator.run_batch("3f0c8a4e-6f1d-4c55-9a39-0c1c2f6e7b10")

    @pytest.mark.asyncio
    async def test_empty_pending_list_completes_with_zero_counts(
        self, config, authenticator
    ):
        """没有待处理条目时正常完成，并关闭适配器。"""
        uow = _mock_uow(BatchConfig(config_id=1, vendor_name="vendor_a"))
        provider = Mock()
        provider.name.return_value = "vendor_a"
        provider.close = AsyncMock()
        orchestrator = self._build(
            config, authenticator, uow, Mock(return_value=provider)
        )

        summary = await orchestrator.run_batch("3f0c8a4e-6f1d-4c55-9a39-0c1c2f6e7b10")

        assert (summary.processed, summary.succeeded, summary.failed, summary.skipped) == (
            0,
            0,
            0,
            0,
        )
        provider.close.assert_awaited_once()
        uow.work_items.release_claims.assert_awaited_once_with(summary.run_id)


class TestBatchRun:
    def test_transition_updates_state(self):
        run = BatchRun(token="t")
        assert run.state is BatchState.CREATED
        run.transition(BatchState.AUTHENTICATED)
        assert run.state is BatchState.AUTHENTICATED
        assert len(run.run_id) == 32
