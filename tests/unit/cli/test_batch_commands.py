# tests/unit/cli/test_batch_commands.py
"""
针对 `trans-batch run` 命令的单元测试。

批次运行本身被替换为 AsyncMock，这里只验证参数传递、退出码与汇总输出。
"""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from trans_batch.adapters.cli.main import app
from trans_batch.core.exceptions import (
    AuthenticationDenied,
    ConfigurationError,
    NoRecordsFound,
    StoreError,
    UnsupportedProvider,
)
from trans_batch.core.types import BatchSummary, ItemKind

TOKEN = "3f0c8a4e-6f1d-4c55-9a39-0c1c2f6e7b10"
RUN_BATCH = "trans_batch.adapters.cli.commands.batch.runner.run_batch"


@pytest.fixture
def cli_env(tmp_path: Path) -> dict[str, str]:
    return {
        "TRANSBATCH_DATABASE__URL": f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}",
        "TRANSBATCH_LOGGING__LEVEL": "WARNING",
    }


def test_run_prints_summary(cli_env) -> None:
    summary = BatchSummary(run_id="r1", processed=3, succeeded=2, failed=1)
    runner = CliRunner()

    with patch(RUN_BATCH, new=AsyncMock(return_value=summary)) as mock_run:
        result = runner.invoke(app, ["run", TOKEN, "--scope", "text"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "批次汇总" in result.output
    mock_run.assert_awaited_once()
    args, kwargs = mock_run.call_args
    assert args == (TOKEN,)
    assert kwargs["scope"] is ItemKind.TEXT
    assert kwargs["config"].database.url.endswith("cli.db")


def test_run_reports_unpersisted_items(cli_env) -> None:
    summary = BatchSummary(run_id="r1", processed=1, succeeded=1, unpersisted=[42])
    runner = CliRunner()

    with patch(RUN_BATCH, new=AsyncMock(return_value=summary)):
        result = runner.invoke(app, ["run", TOKEN], env=cli_env)

    assert result.exit_code == 0
    assert "42" in result.output


@pytest.mark.parametrize(
    "error, exit_code",
    [
        (NoRecordsFound("no config"), 0),
        (AuthenticationDenied("denied"), 2),
        (UnsupportedProvider("acme"), 3),
        (ConfigurationError("missing api_key"), 3),
        (StoreError("database is locked"), 1),
    ],
)
def test_run_maps_fatal_errors_to_exit_codes(cli_env, error, exit_code) -> None:
    runner = CliRunner()

    with patch(RUN_BATCH, new=AsyncMock(side_effect=error)):
        result = runner.invoke(app, ["run", TOKEN], env=cli_env)

    assert result.exit_code == exit_code


def test_run_rejects_unknown_scope(cli_env) -> None:
    runner = CliRunner()

    with patch(RUN_BATCH, new=AsyncMock()) as mock_run:
        result = runner.invoke(app, ["run", TOKEN, "--scope", "video"], env=cli_env)

    assert result.exit_code != 0
    mock_run.assert_not_awaited()
