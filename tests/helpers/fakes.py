# tests/helpers/fakes.py
"""
提供测试替身 (Test Doubles)：可预测的假供应商适配器及其工厂。
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from trans_batch.adapters.providers.base import (
    BaseProviderConfig,
    BaseTranslationProvider,
)
from trans_batch.adapters.providers.factory import resolve_provider_name
from trans_batch.core.exceptions import ProviderUnavailable
from trans_batch.core.types import BatchConfig, ProviderName


class FakeProviderConfig(BaseProviderConfig):
    """FakeTranslationProvider 的配置模型。"""

    base_url: str = "http://fake-provider.invalid"
    api_key: SecretStr = SecretStr("fake-key")
    fail_on_text: str | None = None
    fail_on_document: str | None = None
    delay: float = 0.0
    fail_on_release: bool = False


class FakeTranslationProvider(BaseTranslationProvider[FakeProviderConfig]):
    """
    一个用于测试的可预测的假供应商适配器，不发起任何网络请求。
    """

    CONFIG_MODEL = FakeProviderConfig
    PROVIDER = ProviderName.VENDOR_A
    VERSION = "0.1.0-fake"

    def __init__(self, config: FakeProviderConfig, *, staging_dir: Path, **kwargs: Any):
        super().__init__(config, staging_dir=staging_dir, **kwargs)
        self.text_calls: list[tuple[str, str]] = []
        self.document_calls: list[tuple[Path, str]] = []
        self.release_calls = 0

    async def _translate_text(self, source_text: str, target_language: str) -> str:
        self.text_calls.append((source_text, target_language))
        if self.config.delay:
            await asyncio.sleep(self.config.delay)
        if source_text == self.config.fail_on_text:
            raise ProviderUnavailable("fake provider failed")
        return f"Translated('{source_text}') to {target_language}"

    async def _translate_document(self, source_path: Path, target_language: str) -> Path:
        self.document_calls.append((source_path, target_language))
        if source_path.name == self.config.fail_on_document:
            raise ProviderUnavailable("fake provider failed")
        return await self._write_staged(
            self._staging_target(source_path, target_language),
            b"translated:" + source_path.read_bytes(),
        )

    async def _release(self) -> None:
        self.release_calls += 1
        if self.config.fail_on_release:
            raise RuntimeError("release exploded")


class FakeProviderFactory:
    """替代 `create_provider` 的工厂，记录创建过的实例。未知供应商仍会被拒绝。"""

    def __init__(self, **config_overrides: Any):
        self.config_overrides = config_overrides
        self.instances: list[FakeTranslationProvider] = []

    def __call__(
        self, batch_config: BatchConfig, app_config: Any, *, staging_dir: Path
    ) -> FakeTranslationProvider:
        resolve_provider_name(batch_config.vendor_name)
        provider = FakeTranslationProvider(
            FakeProviderConfig(**self.config_overrides), staging_dir=staging_dir
        )
        self.instances.append(provider)
        return provider

    @property
    def last(self) -> FakeTranslationProvider:
        return self.instances[-1]
