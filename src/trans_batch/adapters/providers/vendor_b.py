# src/trans_batch/adapters/providers/vendor_b.py
"""
Vendor B 适配器。

- 文本：`POST /translate?to=<lang>`，请求体为文本对象列表；
- 文档：同步接口 `POST /document:translate`，响应体即译文字节。
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from trans_batch.core.exceptions import ProviderUnavailable
from trans_batch.core.types import ProviderName

from .base import BaseProviderConfig, BaseTranslationProvider


class VendorBConfig(BaseProviderConfig):
    region: str | None = None
    api_version: str = "3.0"


class VendorBProvider(BaseTranslationProvider[VendorBConfig]):
    CONFIG_MODEL = VendorBConfig
    PROVIDER = ProviderName.VENDOR_B

    def _auth_headers(self) -> dict[str, str]:
        headers = {"X-Api-Key": self.config.api_key.get_secret_value()}
        if self.config.region:
            headers["X-Api-Region"] = self.config.region
        return headers

    async def _translate_text(self, source_text: str, target_language: str) -> str:
        response = await self._request(
            "POST",
            "/translate",
            params={"api-version": self.config.api_version, "to": target_language},
            json=[{"text": source_text}],
        )
        body = self._json(response)
        try:
            return str(body[0]["translations"][0]["text"])
        except (LookupError, TypeError) as e:
            raise ProviderUnavailable("vendor_b response has no translations") from e

    async def _translate_document(self, source_path: Path, target_language: str) -> Path:
        content = await asyncio.to_thread(source_path.read_bytes)
        response = await self._request(
            "POST",
            "/document:translate",
            params={
                "api-version": self.config.api_version,
                "targetLanguage": target_language,
            },
            files={
                "document": (
                    source_path.name,
                    content,
                    self._guess_mime_type(source_path),
                )
            },
        )
        return await self._write_staged(
            self._staging_target(source_path, target_language), response.content
        )
