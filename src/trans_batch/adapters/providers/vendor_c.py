# src/trans_batch/adapters/providers/vendor_c.py
"""
Vendor C 适配器。

按项目与区域寻址的 JSON 接口；文档内容以 base64 形式收发。
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from pathlib import Path

from trans_batch.core.exceptions import ProviderUnavailable
from trans_batch.core.types import ProviderName

from .base import BaseProviderConfig, BaseTranslationProvider


class VendorCConfig(BaseProviderConfig):
    project_id: str
    location: str = "global"


class VendorCProvider(BaseTranslationProvider[VendorCConfig]):
    CONFIG_MODEL = VendorCConfig
    PROVIDER = ProviderName.VENDOR_C

    @property
    def _parent(self) -> str:
        return f"/v3/projects/{self.config.project_id}/locations/{self.config.location}"

    async def _translate_text(self, source_text: str, target_language: str) -> str:
        response = await self._request(
            "POST",
            f"{self._parent}:translateText",
            json={
                "contents": [source_text],
                "targetLanguageCode": target_language,
                "mimeType": "text/plain",
            },
        )
        translations = self._json(response).get("translations") or []
        if not translations or "translatedText" not in translations[0]:
            raise ProviderUnavailable("vendor_c response has no translations")
        return str(translations[0]["translatedText"])

    async def _translate_document(self, source_path: Path, target_language: str) -> Path:
        content = await asyncio.to_thread(source_path.read_bytes)
        response = await self._request(
            "POST",
            f"{self._parent}:translateDocument",
            json={
                "targetLanguageCode": target_language,
                "documentInputConfig": {
                    "content": base64.b64encode(content).decode("ascii"),
                    "mimeType": self._guess_mime_type(source_path),
                },
            },
        )
        outputs = (
            self._json(response).get("documentTranslation", {}).get("byteStreamOutputs")
            or []
        )
        if not outputs:
            raise ProviderUnavailable("vendor_c response has no document output")
        try:
            translated = base64.b64decode(outputs[0], validate=True)
        except (binascii.Error, ValueError) as e:
            raise ProviderUnavailable("vendor_c returned undecodable document bytes") from e
        return await self._write_staged(
            self._staging_target(source_path, target_language), translated
        )
