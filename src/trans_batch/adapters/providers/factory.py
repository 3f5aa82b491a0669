# src/trans_batch/adapters/providers/factory.py
"""
翻译供应商工厂

根据批次配置中的供应商名称，选择并实例化对应的适配器。
供应商配置由三部分按优先级合并：批次凭据 > 供应商设置 > 全局重试策略。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import ValidationError

from trans_batch.core.exceptions import ConfigurationError, UnsupportedProvider
from trans_batch.core.types import BatchConfig, ProviderName

from . import PROVIDER_REGISTRY

if TYPE_CHECKING:
    from trans_batch.config import TransBatchConfig

    from .base import BaseTranslationProvider

logger = structlog.get_logger(__name__)


def resolve_provider_name(vendor_name: str) -> ProviderName:
    """将配置中的供应商字符串解析为枚举（忽略大小写与首尾空白）。"""
    try:
        return ProviderName((vendor_name or "").strip().lower())
    except ValueError as e:
        raise UnsupportedProvider(vendor_name) from e


def create_provider(
    batch_config: BatchConfig,
    app_config: "TransBatchConfig",
    *,
    staging_dir: Path,
    transport: httpx.AsyncBaseTransport | None = None,
) -> "BaseTranslationProvider[Any]":
    """
    创建批次使用的供应商适配器实例。

    Raises:
        UnsupportedProvider: 供应商名称无法识别。
        ConfigurationError: 供应商设置或凭据缺失、无效。
    """
    provider_name = resolve_provider_name(batch_config.vendor_name)
    provider_class = PROVIDER_REGISTRY.get(provider_name)
    if provider_class is None:
        raise UnsupportedProvider(batch_config.vendor_name)

    retry = app_config.retry_policy
    settings = getattr(app_config.providers, provider_name.value)
    raw: dict[str, Any] = {
        "max_retries": retry.max_attempts - 1,
        "initial_backoff": retry.initial_backoff,
        "max_backoff": retry.max_backoff,
        **settings.model_dump(exclude_none=True),
        **batch_config.credentials,
    }

    try:
        provider_config = provider_class.CONFIG_MODEL.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"invalid configuration for provider '{provider_name.value}': {e}"
        ) from e

    provider = provider_class(provider_config, staging_dir=staging_dir, transport=transport)
    logger.info(
        "翻译供应商适配器已创建。",
        provider=provider_name.value,
        version=provider_class.VERSION,
    )
    return provider
