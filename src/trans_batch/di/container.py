# src/trans_batch/di/container.py
"""
应用依赖注入 (DI) 容器。

使用 `dependency-injector` 装配配置、数据库、UoW 与应用服务。
配置对象由调用方显式提供：`AppContainer(config=cfg)`。
"""

from dependency_injector import containers, providers

from trans_batch.adapters.providers.factory import create_provider
from trans_batch.application.authenticator import TokenAuthenticator
from trans_batch.application.change_detector import ChangeDetector
from trans_batch.application.orchestrator import BatchOrchestrator
from trans_batch.config import TransBatchConfig
from trans_batch.infrastructure.db import (
    create_async_db_engine,
    create_async_sessionmaker,
)
from trans_batch.infrastructure.extraction import DocumentTextExtractor
from trans_batch.infrastructure.storage import BatchStorage
from trans_batch.infrastructure.uow import SqlAlchemyUnitOfWork


class AppContainer(containers.DeclarativeContainer):
    """trans-batch 的核心 DI 容器。"""

    # ==================================================================
    # 核心提供者 (Core Providers)
    # ==================================================================

    config = providers.Dependency(instance_of=TransBatchConfig)

    db_engine = providers.Singleton(create_async_db_engine, cfg=config)

    db_sessionmaker = providers.Singleton(create_async_sessionmaker, engine=db_engine)

    uow_factory = providers.Factory(
        SqlAlchemyUnitOfWork,
        sessionmaker=db_sessionmaker,
    )

    # ==================================================================
    # 基础设施与适配器 (Infrastructure & Adapters)
    # ==================================================================

    storage = providers.Singleton(BatchStorage, settings=config.provided.storage)

    text_extractor = providers.Singleton(DocumentTextExtractor)

    provider_factory = providers.Object(create_provider)

    # ==================================================================
    # 应用服务 (Application Services)
    # ==================================================================

    authenticator = providers.Factory(
        TokenAuthenticator,
        uow_factory=uow_factory.provider,
    )

    change_detector = providers.Factory(
        ChangeDetector,
        uow_factory=uow_factory.provider,
        extractor=text_extractor,
    )

    orchestrator = providers.Factory(
        BatchOrchestrator,
        config=config,
        uow_factory=uow_factory.provider,
        authenticator=authenticator,
        change_detector=change_detector,
        storage=storage,
        provider_factory=provider_factory,
    )
