# src/trans_batch/core/types.py
"""
本模块定义了 trans-batch 的核心数据类型。
这些类型是编排器、适配器与持久层之间数据交换的契约。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ErrorKind

SKIPPED_UNCHANGED_NOTE = "skipped: unchanged"


class ItemKind(str, Enum):
    """工作条目的类型。"""

    TEXT = "text"
    DOCUMENT = "document"


class ProviderName(str, Enum):
    """受支持的翻译供应商。"""

    VENDOR_A = "vendor_a"
    VENDOR_B = "vendor_b"
    VENDOR_C = "vendor_c"


class BatchState(str, Enum):
    """批次在一次运行中的生命周期状态。"""

    CREATED = "created"
    AUTHENTICATED = "authenticated"
    PROVIDER_RESOLVED = "provider_resolved"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ABORTED = "aborted"


class BatchConfig(BaseModel):
    """每个批次的配置记录，批次开始时加载一次，之后不可变。"""

    model_config = ConfigDict(frozen=True)

    config_id: int
    vendor_name: str
    credentials: dict[str, Any] = Field(default_factory=dict)
    on_complete_hook: str | None = None


class WorkItem(BaseModel):
    """一个待翻译的工作条目（文本片段或文档）。"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    token: str
    kind: ItemKind
    source_content: str
    target_language: str
    document_key: str | None = None
    completed: bool = False
    completed_at: datetime | None = None
    output_content: str | None = None
    outcome_note: str | None = None
    attempts: int = 0

    @property
    def effective_document_key(self) -> str:
        """文档的稳定标识；未显式设置时退回到源路径。"""
        return self.document_key or self.source_content

    @classmethod
    def from_orm_model(cls, orm_obj: Any) -> "WorkItem":
        return cls.model_validate(orm_obj, from_attributes=True)


class TranslationOutcome(BaseModel):
    """单个条目处理后的瞬态结果。"""

    item_id: int
    succeeded: bool
    skipped: bool = False
    translated_content: str | None = None
    error_kind: ErrorKind | None = None
    error_detail: str | None = None
    is_retryable: bool = False

    @property
    def outcome_note(self) -> str | None:
        """持久化到条目上的备注：跳过说明、失败摘要，成功时为空。"""
        if self.skipped:
            return SKIPPED_UNCHANGED_NOTE
        if self.succeeded:
            return None
        kind = self.error_kind.value if self.error_kind else ErrorKind.UNEXPECTED.value
        return f"{kind}: {self.error_detail or ''}".strip()


class ChangeSnapshot(BaseModel):
    """文档最近一次被检查时的内容快照。"""

    model_config = ConfigDict(from_attributes=True)

    document_key: str
    content: bytes
    source_suffix: str = ""
    normalized_digest: str | None = None
    checked_at: datetime


class ChangeDecision(BaseModel):
    """变更检测的结论。"""

    should_translate: bool
    reason: str
    counterpart_ref: str | None = None


@dataclass
class BatchSummary:
    """
    一次批次运行的汇总计数。

    计数只包含本次运行实际写回（或尝试写回）的条目：认领被其他运行接管、
    写回被拒绝的条目不计入。写回时发生存储错误的条目仍按其结果计数，
    同时列入 `unpersisted`，两者有意重叠。
    """

    run_id: str
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    unpersisted: list[int] = field(default_factory=list)

    def record(self, outcome: TranslationOutcome) -> None:
        self.processed += 1
        if outcome.skipped:
            self.skipped += 1
        elif outcome.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1
