# src/trans_batch/adapters/cli/commands/batch.py
"""
批次命令：运行一个批次，以及查看批次条目状态。
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from trans_batch import runner
from trans_batch.bootstrap import create_container
from trans_batch.config import TransBatchConfig
from trans_batch.core.exceptions import (
    AuthenticationDenied,
    ConfigurationError,
    NoRecordsFound,
    StoreError,
    UnsupportedProvider,
)
from trans_batch.core.types import BatchSummary, ItemKind, WorkItem
from trans_batch.infrastructure.db import dispose_engine

console = Console()

EXIT_STORE_ERROR = 1
EXIT_AUTH_DENIED = 2
EXIT_SETUP_ERROR = 3


def batch_run(
    ctx: typer.Context,
    token: str = typer.Argument(..., help="批次令牌 (UUID)。"),
    scope: Optional[ItemKind] = typer.Option(
        None, "--scope", case_sensitive=False, help="只处理指定类型的条目。"
    ),
) -> None:
    """运行一个批次：翻译令牌下所有待处理的条目。"""
    config: TransBatchConfig = ctx.obj
    try:
        summary = asyncio.run(runner.run_batch(token, config=config, scope=scope))
    except NoRecordsFound:
        console.print("[yellow]令牌下没有批次配置，无需处理。[/yellow]")
        return
    except AuthenticationDenied:
        console.print("[bold red]❌ 令牌认证失败。[/bold red]")
        raise typer.Exit(code=EXIT_AUTH_DENIED)
    except (UnsupportedProvider, ConfigurationError) as e:
        console.print(f"[bold red]❌ 批次配置无效: {e}[/bold red]")
        raise typer.Exit(code=EXIT_SETUP_ERROR)
    except StoreError as e:
        console.print(f"[bold red]❌ 存储访问失败: {e}[/bold red]")
        raise typer.Exit(code=EXIT_STORE_ERROR)

    _print_summary(summary)


def batch_status(
    ctx: typer.Context,
    token: str = typer.Argument(..., help="批次令牌 (UUID)。"),
) -> None:
    """列出批次下所有条目的完成状态与结果备注。"""
    config: TransBatchConfig = ctx.obj

    async def _async_list() -> list[WorkItem]:
        container = create_container(config)
        engine = container.db_engine()
        try:
            async with container.uow_factory() as uow:
                return await uow.work_items.list_items(token)
        finally:
            await dispose_engine(engine)

    try:
        items = asyncio.run(_async_list())
    except StoreError as e:
        console.print(f"[bold red]❌ 存储访问失败: {e}[/bold red]")
        raise typer.Exit(code=EXIT_STORE_ERROR)

    if not items:
        console.print("[yellow]令牌下没有条目。[/yellow]")
        return

    table = Table(title=f"批次 {token}")
    table.add_column("ID", justify="right")
    table.add_column("类型")
    table.add_column("语言")
    table.add_column("完成")
    table.add_column("尝试", justify="right")
    table.add_column("备注", overflow="fold")
    for item in items:
        table.add_row(
            str(item.id),
            item.kind.value,
            item.target_language,
            "✅" if item.completed else "-",
            str(item.attempts),
            item.outcome_note or "",
        )
    console.print(table)


def _print_summary(summary: BatchSummary) -> None:
    table = Table(title="批次汇总", show_header=False)
    table.add_column(style="dim")
    table.add_column(justify="right")
    table.add_row("processed", str(summary.processed))
    table.add_row("succeeded", f"[green]{summary.succeeded}[/green]")
    table.add_row("failed", f"[red]{summary.failed}[/red]")
    table.add_row("skipped", str(summary.skipped))
    console.print(table)
    if summary.unpersisted:
        console.print(
            "[bold yellow]⚠️ 以下条目结果未能写回，需要人工处理: "
            f"{', '.join(str(i) for i in summary.unpersisted)}[/bold yellow]"
        )
