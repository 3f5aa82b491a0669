# src/trans_batch/infrastructure/storage.py
"""
批次的文件系统边界。

- 源文档路径解析（相对路径基于 `storage.source_root`）；
- 每次运行一个暂存目录 `<staging_root>/<token>/<run_id>/`，运行结束后删除；
- 译文发布到 `<output_root>/<token>/<原文件名>_<语言><后缀>`。
"""

from __future__ import annotations

import shutil
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import Path

import structlog

from trans_batch.config import StorageSettings

logger = structlog.get_logger(__name__)


def translated_name(source: Path, target_language: str) -> str:
    """译文文件名：`report.pdf` -> `report_de.pdf`。"""
    return f"{source.stem}_{target_language}{source.suffix}"


class BatchStorage:
    """管理源文档、暂存区与输出区。"""

    def __init__(self, settings: StorageSettings):
        self._settings = settings

    def resolve_source(self, source_ref: str) -> Path:
        path = Path(source_ref)
        if not path.is_absolute() and self._settings.source_root is not None:
            path = self._settings.source_root / path
        return path

    @contextmanager
    def staging_area(self, token: str, run_id: str) -> Iterator[Path]:
        """
        创建本次运行专属的暂存目录，退出时（除非配置保留）将其删除。

        同一令牌的并发运行各自使用独立的子目录；令牌目录只在为空时才一并删除。
        """
        staging_dir = self._settings.staging_root / token / run_id
        staging_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("暂存目录已创建。", path=str(staging_dir))
        try:
            yield staging_dir
        finally:
            if self._settings.keep_staging:
                logger.info("按配置保留暂存目录。", path=str(staging_dir))
            else:
                try:
                    shutil.rmtree(staging_dir)
                except OSError:
                    logger.warning(
                        "删除暂存目录失败。", path=str(staging_dir), exc_info=True
                    )
                with suppress(OSError):
                    staging_dir.parent.rmdir()

    def publish(
        self, staged: Path, *, source: Path, target_language: str, token: str
    ) -> Path:
        """将暂存区中的译文移动到输出目录并返回最终路径。"""
        destination_dir = self._settings.output_root / token
        destination_dir.mkdir(parents=True, exist_ok=True)
        destination = destination_dir / translated_name(source, target_language)
        shutil.move(str(staged), destination)
        return destination
