# src/trans_batch/observability/logging_config.py
"""
集中配置项目日志系统：structlog ⇄ 标准 logging，并通过 Rich 渲染控制台输出。

提供两种输出：
- console：面向操作员的单行彩色输出（本地时间，键值对按键名排序）。
- json   ：结构化日志（ISO-8601 且 UTC），便于日志平台聚合。

批处理任务常由调度器在无终端环境下运行，生产环境建议使用 json。
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Literal

import structlog
from rich.console import Console
from rich.text import Text
from structlog.typing import Processor

if TYPE_CHECKING:
    from trans_batch.config import TransBatchConfig

_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "asyncio",
    "aiosqlite",
    "sqlalchemy.engine.Engine",
)


class RichLineRenderer:
    """
    structlog 处理器：将一条日志渲染为一行 Rich 文本。

    格式：`时间 级别 [logger] 消息  key=value ...`，过长的值会被截断。
    """

    _LEVEL_STYLES: dict[str, tuple[str, str]] = {
        "debug": ("cyan", "DEBUG"),
        "info": ("green", "INFO"),
        "warning": ("yellow", "WARN"),
        "error": ("bold red", "ERROR"),
        "critical": ("magenta", "CRIT"),
    }

    def __init__(
        self,
        *,
        kv_truncate_at: int = 200,
        show_logger_name: bool = True,
        console: Console | None = None,
    ) -> None:
        self._console = console or Console(soft_wrap=True)
        self._kv_truncate_at = kv_truncate_at
        self._show_logger_name = show_logger_name

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event_msg = str(event_dict.pop("event", "")).strip()
        timestamp = event_dict.pop("timestamp", "")
        level = str(event_dict.pop("level", "info")).lower()
        logger_name = event_dict.pop("logger", "")
        exception = event_dict.pop("exception", None)
        event_dict.pop("_record", None)
        event_dict.pop("_from_structlog", None)

        style, label = self._LEVEL_STYLES.get(level, ("dim", level.upper()))
        line = Text()
        if timestamp:
            line.append(f"{timestamp} ", style="dim")
        line.append(f"{label:<5}", style=style)
        if self._show_logger_name and logger_name:
            line.append(f" [{logger_name}]", style="cyan dim")
        line.append(f" {event_msg}")

        for key, value in sorted(event_dict.items()):
            value_repr = value if isinstance(value, str) else repr(value)
            if len(value_repr) > self._kv_truncate_at:
                value_repr = value_repr[: self._kv_truncate_at] + "…"
            line.append(f"  {key}=", style="dim")
            line.append(value_repr, style="bright_white")

        with self._console.capture() as capture:
            self._console.print(line)
        rendered = capture.get().rstrip()
        if exception:
            rendered = f"{rendered}\n{exception}"
        return rendered


def setup_logging(
    *,
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    root_level: str | None = None,
    service: str | None = None,
    silence_noisy_libs: bool = True,
) -> None:
    """
    配置全局 structlog 日志系统。

    Args:
        log_level: `trans_batch` logger 的最低级别。
        log_format: 'console'（人类友好）或 'json'（结构化）。
        root_level: 根 logger 级别；默认 WARNING 以降低第三方噪声。
        service: 统一绑定到日志的服务名（通过 contextvars 注入）。
        silence_noisy_libs: 是否下调常见噪声 logger 的级别。
    """
    timestamper = (
        structlog.processors.TimeStamper(fmt="iso", utc=True)
        if log_format == "json"
        else structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False)
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    final_renderer: Processor
    if log_format == "console":
        final_renderer = RichLineRenderer()
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=final_renderer,
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            timestamper,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((root_level or "WARNING").upper())

    app_logger = logging.getLogger("trans_batch")
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.contextvars.clear_contextvars()
    if service:
        structlog.contextvars.bind_contextvars(service=service)

    if silence_noisy_libs:
        for noisy in _NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.get_logger("trans_batch.logging_config").debug(
        "日志系统已配置完成。",
        log_format=log_format,
        app_log_level=log_level.upper(),
        service=service,
    )


def setup_logging_from_config(
    cfg: "TransBatchConfig", *, service: str = "trans-batch"
) -> None:
    """根据 TransBatchConfig 一键初始化日志系统。"""
    setup_logging(
        log_level=cfg.logging.level,
        log_format=cfg.logging.format,
        service=service,
    )
