# tests/conftest.py
"""
Pytest 共享夹具。

核心 Fixtures:
- test_config: 指向临时目录（SQLite 文件、源文档、暂存区、输出区）的配置对象。
- db_engine: 已建好所有表的异步引擎。
- sessionmaker / uow_factory: 与 db_engine 绑定的会话工厂与 UoW 工厂。
- provider_factory / orchestrator: 使用假供应商适配器装配的批次编排器。
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from trans_batch.application import BatchOrchestrator, ChangeDetector, TokenAuthenticator
from trans_batch.config import (
    DatabaseSettings,
    ProviderSettings,
    ProvidersSettings,
    RetryPolicySettings,
    StorageSettings,
    TransBatchConfig,
)
from trans_batch.infrastructure.db import (
    create_async_db_engine,
    create_async_sessionmaker,
    create_schema,
)
from trans_batch.infrastructure.extraction import DocumentTextExtractor
from trans_batch.infrastructure.storage import BatchStorage
from trans_batch.infrastructure.uow import SqlAlchemyUnitOfWork, UowFactory

from tests.helpers.fakes import FakeProviderFactory


def _fast_provider(base_url: str) -> ProviderSettings:
    return ProviderSettings(
        base_url=base_url, call_timeout=5.0, poll_max_attempts=3, poll_interval=0
    )


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def test_config(tmp_path: Path, source_dir: Path) -> TransBatchConfig:
    return TransBatchConfig(
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        retry_policy=RetryPolicySettings(
            max_attempts=2, initial_backoff=0.001, max_backoff=0.001
        ),
        providers=ProvidersSettings(
            vendor_a=_fast_provider("https://vendor-a.test"),
            vendor_b=_fast_provider("https://vendor-b.test"),
            vendor_c=_fast_provider("https://vendor-c.test"),
        ),
        storage=StorageSettings(
            source_root=source_dir,
            staging_root=tmp_path / "staging",
            output_root=tmp_path / "output",
        ),
    )


@pytest_asyncio.fixture
async def db_engine(test_config: TransBatchConfig) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_db_engine(test_config)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_async_sessionmaker(db_engine)


@pytest.fixture
def uow_factory(sessionmaker: async_sessionmaker[AsyncSession]) -> UowFactory:
    return lambda: SqlAlchemyUnitOfWork(sessionmaker)


@pytest.fixture
def provider_factory() -> FakeProviderFactory:
    return FakeProviderFactory()


@pytest.fixture
def orchestrator(
    test_config: TransBatchConfig,
    uow_factory: UowFactory,
    provider_factory: FakeProviderFactory,
) -> BatchOrchestrator:
    return BatchOrchestrator(
        config=test_config,
        uow_factory=uow_factory,
        authenticator=TokenAuthenticator(uow_factory),
        change_detector=ChangeDetector(uow_factory, DocumentTextExtractor()),
        storage=BatchStorage(test_config.storage),
        provider_factory=provider_factory,
    )
