# src/trans_batch/core/exceptions.py
"""
定义了 trans-batch 的统一异常体系。

每个异常都携带一个 `ErrorKind` 标签，调用方依据标签（而不是消息文本）来区分：
- 致命错误：在批次建立阶段抛出，终止整个批次；
- 条目级错误：在单个条目处理时抛出，由编排器在条目边界捕获并记录。
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """带标签的错误分类。"""

    AUTHENTICATION_DENIED = "authentication_denied"
    NO_RECORDS_FOUND = "no_records_found"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    CONFIGURATION_ERROR = "configuration_error"
    STORE_ERROR = "store_error"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    TIMEOUT = "timeout"
    INVALID_ARGUMENT = "invalid_argument"
    UNEXPECTED = "unexpected"


class TransBatchError(Exception):
    """所有 trans-batch 自定义异常的基类。"""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    is_fatal: bool = False
    is_retryable: bool = False


# --- 致命错误（批次建立阶段） ---


class AuthenticationDenied(TransBatchError):
    """批次令牌未通过认证。"""

    kind = ErrorKind.AUTHENTICATION_DENIED
    is_fatal = True


class NoRecordsFound(TransBatchError):
    """令牌下不存在批次配置。属于良性的“空批次”。"""

    kind = ErrorKind.NO_RECORDS_FOUND
    is_fatal = True


class UnsupportedProvider(TransBatchError):
    """批次配置中的供应商名称无法识别。"""

    kind = ErrorKind.UNSUPPORTED_PROVIDER
    is_fatal = True

    def __init__(self, vendor_name: str):
        super().__init__(f"unsupported provider: {vendor_name!r}")
        self.vendor_name = vendor_name


class ConfigurationError(TransBatchError):
    """配置或凭据不合法。"""

    kind = ErrorKind.CONFIGURATION_ERROR
    is_fatal = True


class StoreError(TransBatchError):
    """持久化存储读写失败。在建立阶段是致命的，在条目阶段只记录日志。"""

    kind = ErrorKind.STORE_ERROR
    is_fatal = True


# --- 条目级错误 ---


class ProviderUnavailable(TransBatchError):
    """网络、认证或配额等原因导致供应商调用失败。"""

    kind = ErrorKind.PROVIDER_UNAVAILABLE
    is_retryable = True

    def __init__(self, message: str, *, is_retryable: bool = True):
        super().__init__(message)
        self.is_retryable = is_retryable


class TranslationTimeout(TransBatchError):
    """单次调用或轮询超出了配置的上限。"""

    kind = ErrorKind.TIMEOUT
    is_retryable = True


class InvalidArgument(TransBatchError):
    """输入不合法（空文本、空语言、缺失的源文件）。在发起任何网络请求前抛出。"""

    kind = ErrorKind.INVALID_ARGUMENT
