# src/trans_batch/adapters/providers/vendor_a.py
"""
Vendor A 适配器。

- 文本：`POST /v1/translate`
- 文档：异步任务流程（上传文档、创建任务、轮询直至终态、下载结果）。
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from trans_batch.core.exceptions import ProviderUnavailable
from trans_batch.core.types import ProviderName

from .base import BaseProviderConfig, BaseTranslationProvider

logger = structlog.get_logger(__name__)

_JOB_SUCCEEDED = "succeeded"
_JOB_FAILED = {"failed", "cancelled"}


class VendorAConfig(BaseProviderConfig):
    source_language: str = "auto"


class VendorAProvider(BaseTranslationProvider[VendorAConfig]):
    CONFIG_MODEL = VendorAConfig
    PROVIDER = ProviderName.VENDOR_A

    async def _translate_text(self, source_text: str, target_language: str) -> str:
        response = await self._request(
            "POST",
            "/v1/translate",
            json={
                "text": source_text,
                "source_language": self.config.source_language,
                "target_language": target_language,
            },
        )
        translated = self._json(response).get("translated_text")
        if not isinstance(translated, str):
            raise ProviderUnavailable("vendor_a response is missing 'translated_text'")
        return translated

    async def _translate_document(self, source_path: Path, target_language: str) -> Path:
        content = await asyncio.to_thread(source_path.read_bytes)
        upload = await self._request(
            "POST",
            "/v1/documents",
            files={
                "file": (source_path.name, content, self._guess_mime_type(source_path))
            },
        )
        document_id = self._json(upload).get("document_id")
        if not document_id:
            raise ProviderUnavailable("vendor_a did not return a document id")

        job = await self._request(
            "POST",
            "/v1/jobs",
            json={"document_id": document_id, "target_language": target_language},
        )
        job_id = self._json(job).get("job_id")
        if not job_id:
            raise ProviderUnavailable("vendor_a did not return a job id")
        logger.info("Vendor A 文档翻译任务已创建。", job_id=job_id, document=source_path.name)

        async def _job_finished() -> bool:
            status_response = await self._request("GET", f"/v1/jobs/{job_id}")
            body = self._json(status_response)
            status = str(body.get("status", "")).lower()
            if status in _JOB_FAILED:
                raise ProviderUnavailable(
                    f"vendor_a job {job_id} {status}: {body.get('error', 'no detail')}",
                    is_retryable=False,
                )
            return status == _JOB_SUCCEEDED

        await self._poll_until(_job_finished, description=f"vendor_a job {job_id}")

        result = await self._request("GET", f"/v1/jobs/{job_id}/result")
        return await self._write_staged(
            self._staging_target(source_path, target_language), result.content
        )
