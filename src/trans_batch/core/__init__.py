# src/trans_batch/core/__init__.py
"""
trans-batch 核心契约：异常、数据类型与持久层协议。
"""

from .exceptions import (
    AuthenticationDenied,
    ConfigurationError,
    ErrorKind,
    InvalidArgument,
    NoRecordsFound,
    ProviderUnavailable,
    StoreError,
    TransBatchError,
    TranslationTimeout,
    UnsupportedProvider,
)
from .interfaces import TextExtractor
from .types import (
    SKIPPED_UNCHANGED_NOTE,
    BatchConfig,
    BatchState,
    BatchSummary,
    ChangeDecision,
    ChangeSnapshot,
    ItemKind,
    ProviderName,
    TranslationOutcome,
    WorkItem,
)
from .uow import IUnitOfWork

__all__ = [
    # from exceptions.py
    "TransBatchError", "ErrorKind", "AuthenticationDenied", "NoRecordsFound",
    "UnsupportedProvider", "ConfigurationError", "StoreError",
    "ProviderUnavailable", "TranslationTimeout", "InvalidArgument",
    # from interfaces.py
    "TextExtractor",
    # from types.py
    "SKIPPED_UNCHANGED_NOTE", "ItemKind", "ProviderName", "BatchState",
    "BatchConfig", "WorkItem", "TranslationOutcome", "ChangeSnapshot",
    "ChangeDecision", "BatchSummary",
    # from uow.py
    "IUnitOfWork",
]
