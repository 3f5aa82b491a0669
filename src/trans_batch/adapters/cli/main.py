# src/trans_batch/adapters/cli/main.py
"""
trans-batch 命令行入口。
"""

from typing import Annotated, Literal

import typer
from rich.traceback import install as install_rich_tracebacks

from trans_batch.bootstrap import create_app_config
from trans_batch.observability.logging_config import setup_logging_from_config

from .commands import batch, db

install_rich_tracebacks(show_locals=False, word_wrap=True)

app = typer.Typer(
    name="trans-batch",
    help="按令牌运行批量翻译任务。",
    add_completion=False,
    no_args_is_help=True,
)

app.command("run")(batch.batch_run)
app.command("status")(batch.batch_status)
app.add_typer(db.app, name="db")


@app.callback()
def main(
    ctx: typer.Context,
    env: Annotated[
        str, typer.Option("--env", help="运行环境 (dev, test, prod)")
    ] = "prod",
):
    """
    主回调函数，在任何子命令执行前运行，负责加载配置和初始化日志。
    """
    if ctx.resilient_parsing:
        return

    env_mode: Literal["prod", "dev", "test"] = env.lower()  # type: ignore[assignment]
    config = create_app_config(env_mode)
    setup_logging_from_config(config, service="trans-batch-cli")
    ctx.obj = config


if __name__ == "__main__":
    app()
