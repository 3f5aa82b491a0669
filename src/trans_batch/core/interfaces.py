# src/trans_batch/core/interfaces.py
"""
定义了应用层依赖的可替换组件协议。
"""

from __future__ import annotations

from typing import Protocol


class TextExtractor(Protocol):
    """从文档字节中提取纯文本，用于内容比较。"""

    def extract(self, data: bytes, *, suffix: str) -> str: ...
