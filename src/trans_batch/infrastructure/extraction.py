# src/trans_batch/infrastructure/extraction.py
"""
文档文本提取：PDF 通过 pypdf 提取文本层，其余格式按 UTF-8 文本解码。
"""

from __future__ import annotations

import io

import structlog
from pypdf import PdfReader

logger = structlog.get_logger(__name__)


class DocumentTextExtractor:
    """按文件后缀选择提取方式的默认 TextExtractor 实现。"""

    def extract(self, data: bytes, *, suffix: str) -> str:
        if suffix.lower() == ".pdf":
            return self._extract_pdf(data)
        return data.decode("utf-8")

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        logger.debug("PDF 文本已提取。", pages=len(pages))
        return "\n".join(pages)
