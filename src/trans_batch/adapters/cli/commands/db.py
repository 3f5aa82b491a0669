# src/trans_batch/adapters/cli/commands/db.py
"""
数据库管理命令。
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from trans_batch.config import TransBatchConfig
from trans_batch.infrastructure.db import (
    create_async_db_engine,
    create_schema,
    dispose_engine,
)

app = typer.Typer(help="数据库管理命令。", no_args_is_help=True)
console = Console()


@app.command("init")
def db_init(ctx: typer.Context) -> None:
    """创建所有缺失的数据表。"""
    config: TransBatchConfig = ctx.obj

    async def _async_init() -> None:
        engine = create_async_db_engine(config)
        try:
            await create_schema(engine)
        finally:
            await dispose_engine(engine)

    try:
        asyncio.run(_async_init())
    except (SQLAlchemyError, OSError) as e:
        console.print(f"[bold red]❌ 初始化数据库失败: {e}[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]✅ 数据库表已就绪。[/bold green]")
