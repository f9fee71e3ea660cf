"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from prodtimer.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["saved", "--examples"], ["prodtimer saved list", "prodtimer saved add"]),
    (["saved", "list", "--examples"], ["-q saved list"]),
    (["saved", "add", "--examples"], ["--duration 25"]),
    (["saved", "delete", "--examples"], ["prodtimer saved delete coding"]),
    (["stats", "--examples"], ["prodtimer stats 1", "mm-dd-yyyy"]),
    (["run", "--examples"], ["prodtimer run coding", "--duration 3"]),
    (["shell", "--examples"], ["prodtimer shell"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    """Generate a readable test ID from args."""
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


class TestExamplesInHelp:
    @pytest.mark.parametrize(
        "args",
        [["saved", "--help"], ["saved", "add", "--help"], ["stats", "--help"], ["run", "--help"]],
    )
    def test_examples_in_help(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "--examples" in result.output


class TestExamplesEagerExit:
    def test_examples_skips_required_args(self, cli_runner: CliRunner) -> None:
        # 'saved delete' requires NAME, but --examples should work without it
        result = cli_runner.invoke(cli, ["saved", "delete", "--examples"])
        assert result.exit_code == 0
        assert "Examples for" in result.output

    def test_examples_does_not_touch_data_dir(
        self, cli_runner: CliRunner, data_dir: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["stats", "--examples"])
        assert result.exit_code == 0
        assert not data_dir.exists()
