# src/trans_batch/domain/normalization.py
"""
包含文档内容比较所用的文本归一化与摘要逻辑。
"""

from __future__ import annotations

import hashlib
import re

RE_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    对提取出的文档文本进行归一化，使仅空白或大小写不同的内容视为相同。

    归一化流程：
    1. 将任意连续空白字符（含换行、制表符）压缩为单个空格。
    2. 去除首尾空白。
    3. 转为小写。
    """
    return RE_WHITESPACE.sub(" ", text).strip().lower()


def content_digest(normalized: str) -> str:
    """归一化文本的 SHA-256 十六进制摘要。"""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
