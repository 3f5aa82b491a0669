# src/trans_batch/config.py
"""
trans-batch 配置（Pydantic v2 + pydantic-settings）。

配置对象在进程启动时构造一次，并显式传递给需要它的组件；不存在全局单例。
环境变量前缀为 `TRANSBATCH_`，嵌套字段用 `__` 分隔，例如：
`TRANSBATCH_PROVIDERS__VENDOR_A__BASE_URL=https://...`
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.url import make_url

# ===================== 子模型 =====================


class DatabaseSettings(BaseModel):
    """主库（运行期异步驱动）"""

    url: str = Field(
        default="sqlite+aiosqlite:///transbatch.db",
        description="异步 DSN（sqlite+aiosqlite / postgresql+asyncpg）",
    )
    echo: bool = Field(default=False, description="SQLAlchemy echo（调试）")

    @field_validator("url")
    @classmethod
    def _validate_async_driver(cls, v: str) -> str:
        allowed = {"sqlite+aiosqlite", "postgresql+asyncpg"}
        try:
            drv = make_url(v).drivername.lower()
        except Exception as e:
            raise ValueError(f"非法数据库 URL：{v!r}（{e}）") from e
        if drv not in allowed:
            raise ValueError(
                f"不支持的运行期数据库驱动：{drv!r}，仅允许 {', '.join(sorted(allowed))}"
            )
        return v


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")


class RetryPolicySettings(BaseModel):
    """适配器内部重试的默认策略，可被各供应商配置覆盖。"""

    max_attempts: int = Field(default=2, ge=1, description="每次调用的总尝试次数（含首次）")
    initial_backoff: float = Field(default=1.0, gt=0)
    max_backoff: float = Field(default=30.0, gt=0)


class ProviderSettings(BaseModel):
    """单个供应商的连接与超时设置。凭据来自批次配置，不在这里。"""

    base_url: Optional[str] = Field(default=None)
    timeout: float = Field(default=30.0, gt=0, description="单次 HTTP 请求超时")
    connect_timeout: float = Field(default=5.0, gt=0)
    call_timeout: float = Field(
        default=600.0, gt=0, description="一次适配器调用（含重试与轮询）的总上限"
    )
    max_retries: Optional[int] = Field(default=None, ge=0)
    poll_max_attempts: int = Field(default=60, ge=1)
    poll_interval: float = Field(default=5.0, ge=0)


class ProvidersSettings(BaseModel):
    vendor_a: ProviderSettings = Field(
        default_factory=lambda: ProviderSettings(base_url="https://api.vendor-a.example")
    )
    vendor_b: ProviderSettings = Field(
        default_factory=lambda: ProviderSettings(base_url="https://api.vendor-b.example")
    )
    vendor_c: ProviderSettings = Field(
        default_factory=lambda: ProviderSettings(base_url="https://api.vendor-c.example")
    )


class StorageSettings(BaseModel):
    """文件系统边界：源文档、批次暂存目录与译文输出目录。"""

    source_root: Optional[Path] = Field(
        default=None, description="相对文档路径的解析根目录"
    )
    staging_root: Path = Field(default=Path("./var/staging"))
    output_root: Path = Field(default=Path("./var/output"))
    keep_staging: bool = Field(
        default=False, description="调试用：批次结束后保留暂存目录"
    )


# ===================== 顶层配置 =====================


class TransBatchConfig(BaseSettings):
    """
    trans-batch 核心配置模型。
    """

    debug: bool = False

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    retry_policy: RetryPolicySettings = Field(default_factory=RetryPolicySettings)
    providers: ProvidersSettings = Field(default_factory=ProvidersSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    # --- 连接池高级参数 ---
    db_pool_size: Optional[int] = None
    db_max_overflow: Optional[int] = None
    db_pool_timeout: int = 30
    db_pool_recycle: Optional[int] = None
    db_pool_pre_ping: bool = True

    # --- 批次处理 ---
    claim_lease_seconds: int = Field(
        default=3600, ge=1, description="条目认领租约；过期后可被其他运行重新认领"
    )

    @model_validator(mode="after")
    def _debug_keeps_staging(self) -> "TransBatchConfig":
        if self.debug:
            self.storage.keep_staging = True
        return self

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="TRANSBATCH_",
        case_sensitive=False,
        extra="ignore",
        env_file_encoding="utf-8",
    )
