# src/trans_batch/adapters/providers/base.py
"""
定义了所有翻译供应商适配器的抽象基类和通用配置。

基类负责与供应商无关的部分：
- 在发起任何网络请求前校验参数（空文本、空或非法语言、缺失的源文件）；
- 对瞬时错误（连接失败、429、5xx）按指数退避重试；
- 为每次调用施加总超时，并提供有界轮询；
- 幂等且永不抛出的 `close()`。

子类只需实现 `_translate_text` 与 `_translate_document`。
"""

from __future__ import annotations

import asyncio
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, ClassVar, Generic, TypeVar

import httpx
import langcodes
import structlog
from pydantic import BaseModel, ConfigDict, SecretStr

from trans_batch.core.exceptions import (
    InvalidArgument,
    ProviderUnavailable,
    TransBatchError,
    TranslationTimeout,
)
from trans_batch.core.types import ProviderName
from trans_batch.infrastructure.storage import translated_name

logger = structlog.get_logger(__name__)

_ConfigType = TypeVar("_ConfigType", bound="BaseProviderConfig")
_T = TypeVar("_T")

_RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})


class BaseProviderConfig(BaseModel):
    """所有供应商配置模型的基类。由应用配置与批次凭据合并而成。"""

    model_config = ConfigDict(extra="ignore")

    base_url: str
    api_key: SecretStr
    timeout: float = 30.0
    connect_timeout: float = 5.0
    call_timeout: float = 600.0
    max_retries: int = 2
    initial_backoff: float = 1.0
    max_backoff: float = 30.0
    poll_max_attempts: int = 60
    poll_interval: float = 5.0


class BaseTranslationProvider(ABC, Generic[_ConfigType]):
    """翻译供应商适配器的纯异步抽象基类。每个批次一个实例。"""

    CONFIG_MODEL: type[_ConfigType]
    PROVIDER: ClassVar[ProviderName]
    VERSION: str = "1.0.0"

    def __init__(
        self,
        config: _ConfigType,
        *,
        staging_dir: Path,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.staging_dir = staging_dir
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._closed = False

    @classmethod
    def name(cls) -> str:
        return cls.PROVIDER.value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=self._auth_headers(),
                timeout=httpx.Timeout(
                    self.config.timeout, connect=self.config.connect_timeout
                ),
                transport=self._transport,
            )
        return self._client

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key.get_secret_value()}"}

    # ------------------------------------------------------------------
    # 公共 API
    # ------------------------------------------------------------------

    async def translate_text(self, source_text: str, target_language: str) -> str:
        """将一段文本翻译为目标语言。"""
        self._ensure_open()
        if not source_text or not source_text.strip():
            raise InvalidArgument("source text is empty")
        language = self._validate_language(target_language)
        return await self._bounded(
            self._translate_text(source_text, language), operation="translate_text"
        )

    async def translate_document(self, source_path: Path, target_language: str) -> Path:
        """翻译一个文档，返回暂存目录中译文文件的路径。"""
        self._ensure_open()
        language = self._validate_language(target_language)
        if not source_path.is_file():
            raise InvalidArgument(f"source document not found: {source_path}")
        return await self._bounded(
            self._translate_document(source_path, language),
            operation="translate_document",
        )

    async def close(self) -> None:
        """释放适配器资源。可重复调用，永不抛出。"""
        if self._closed:
            return
        self._closed = True
        try:
            await self._release()
        except Exception:
            logger.warning("关闭供应商适配器时出错，已忽略。", provider=self.name(), exc_info=True)

    # ------------------------------------------------------------------
    # 子类实现
    # ------------------------------------------------------------------

    @abstractmethod
    async def _translate_text(self, source_text: str, target_language: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def _translate_document(self, source_path: Path, target_language: str) -> Path:
        raise NotImplementedError

    async def _release(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # 通用工具
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise ProviderUnavailable(
                f"provider '{self.name()}' is closed", is_retryable=False
            )

    @staticmethod
    def _validate_language(target_language: str) -> str:
        language = (target_language or "").strip()
        if not language:
            raise InvalidArgument("target language is empty")
        if not langcodes.tag_is_valid(language):
            raise InvalidArgument(f"invalid target language: {language!r}")
        return language

    async def _bounded(self, coro: Awaitable[_T], *, operation: str) -> _T:
        try:
            return await asyncio.wait_for(coro, timeout=self.config.call_timeout)
        except asyncio.TimeoutError as e:
            raise TranslationTimeout(
                f"{self.name()} {operation} exceeded {self.config.call_timeout}s"
            ) from e

    def _backoff(self, attempt: int) -> float:
        return min(
            self.config.initial_backoff * (2 ** (attempt - 1)), self.config.max_backoff
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        发送 HTTP 请求。

        瞬时错误按退避策略最多重试 `max_retries` 次；最终失败转换为
        ProviderUnavailable 或 TranslationTimeout，原始异常作为 `__cause__` 保留。
        """
        last_error: TransBatchError | None = None
        last_cause: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            if attempt:
                delay = self._backoff(attempt)
                logger.warning(
                    "供应商请求失败，准备重试。",
                    provider=self.name(),
                    url=url,
                    attempt=attempt,
                    delay=delay,
                    error=str(last_error),
                )
                await asyncio.sleep(delay)
            try:
                response = await self.client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                last_error, last_cause = TranslationTimeout(f"{method} {url} timed out"), e
                continue
            except httpx.TransportError as e:
                last_error = ProviderUnavailable(f"{method} {url} failed: {e}")
                last_cause = e
                continue

            if response.status_code in _RETRYABLE_STATUS:
                last_error = ProviderUnavailable(
                    f"{method} {url} returned HTTP {response.status_code}"
                )
                last_cause = None
                continue
            if response.is_error:
                raise ProviderUnavailable(
                    f"{self.name()} rejected {method} {url}: HTTP "
                    f"{response.status_code} {response.text[:200]}",
                    is_retryable=False,
                )
            return response

        assert last_error is not None
        raise last_error from last_cause

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderUnavailable(
                f"{self.name()} returned a malformed response"
            ) from e

    async def _poll_until(
        self, check: Callable[[], Awaitable[bool]], *, description: str
    ) -> None:
        """反复调用 `check` 直到返回 True；超过 `poll_max_attempts` 次则超时。"""
        for attempt in range(1, self.config.poll_max_attempts + 1):
            if await check():
                return
            logger.debug(
                "等待供应商任务完成。",
                provider=self.name(),
                task=description,
                attempt=attempt,
            )
            if attempt < self.config.poll_max_attempts:
                await asyncio.sleep(self.config.poll_interval)
        raise TranslationTimeout(
            f"{description} did not finish after {self.config.poll_max_attempts} polls"
        )

    def _staging_target(self, source_path: Path, target_language: str) -> Path:
        return self.staging_dir / translated_name(source_path, target_language)

    @staticmethod
    def _guess_mime_type(path: Path) -> str:
        return mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    async def _write_staged(self, target: Path, content: bytes) -> Path:
        if not content:
            raise ProviderUnavailable(f"{self.name()} returned an empty document")
        target.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, content)
        return target
