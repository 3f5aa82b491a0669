# src/trans_batch/bootstrap.py
"""
应用引导程序：加载 .env、构造配置对象并装配 DI 容器。
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import structlog
from dotenv import load_dotenv

from trans_batch.config import TransBatchConfig
from trans_batch.di.container import AppContainer

logger = structlog.get_logger("trans_batch.bootstrap")

EnvMode = Literal["prod", "dev", "test"]


def _load_dotenv_files(env_mode: EnvMode, base_dir: Path | None = None) -> list[Path]:
    """按环境模式加载 `.env` 与 `.env.<mode>`；已存在的环境变量优先。"""
    root = base_dir or Path.cwd()
    candidates = [root / ".env", root / f".env.{env_mode}"]
    loaded = [path for path in candidates if path.is_file()]
    for path in loaded:
        load_dotenv(path, override=False, encoding="utf-8")
    logger.debug("Dotenv files loaded", files=[str(p) for p in loaded])
    return loaded


def create_app_config(
    env_mode: EnvMode = "prod", *, base_dir: Path | None = None
) -> TransBatchConfig:
    """加载、验证并返回应用配置对象。"""
    _load_dotenv_files(env_mode, base_dir)
    return TransBatchConfig()


def create_container(config: TransBatchConfig) -> AppContainer:
    """创建并装配 DI 容器。"""
    return AppContainer(config=config)
