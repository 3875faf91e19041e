"""Command-line interface for bloatreport."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import click
from rich.logging import RichHandler

from bloatreport import __version__
from bloatreport.config import (
    BloatReportConfig,
    get_config_path,
    load_config,
    save_config,
    set_config_value,
)
from bloatreport.exceptions import BloatReportError, ConfigError
from bloatreport.github.comments import CommentClient, UpsertResult
from bloatreport.github.context import (
    IssueContext,
    context_from_environment,
    split_repository,
)
from bloatreport.github.renderer import render_comment
from bloatreport.models import SnapshotDifference, load_snapshots
from bloatreport.ui.console import Console

console = Console()


def _load_config(config_path: str | None) -> BloatReportConfig:
    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)


def _load_all_snapshots(paths: tuple[str, ...]) -> list[SnapshotDifference]:
    snapshots: list[SnapshotDifference] = []
    for path in paths:
        snapshots.extend(load_snapshots(Path(path)))
    return snapshots


def _resolve_repository(repository: str | None) -> tuple[str, str]:
    repository = repository or os.environ.get("GITHUB_REPOSITORY", "")
    if not repository:
        raise ConfigError("No repository given. Pass --repository or set GITHUB_REPOSITORY.")
    return split_repository(repository)


def _resolve_issue(repository: str | None, issue: int | None) -> IssueContext:
    """Explicit --repository/--issue win over the CI environment."""
    if repository and issue is not None:
        owner, repo = split_repository(repository)
        return IssueContext(owner=owner, repo=repo, number=issue)
    context = context_from_environment(issue_number=issue)
    if repository:
        owner, repo = split_repository(repository)
        return IssueContext(owner=owner, repo=repo, number=context.number)
    return context


def _build_comment(
    config: BloatReportConfig,
    snapshot_files: tuple[str, ...],
    toolchain: str,
    commit: str | None,
    base: str | None,
    owner: str | None,
    repo: str | None,
) -> tuple[list[SnapshotDifference], str]:
    current_commit = commit or os.environ.get("GITHUB_SHA", "")
    if not current_commit:
        raise ConfigError("No commit given. Pass --commit or set GITHUB_SHA.")
    snapshots = _load_all_snapshots(snapshot_files)
    body = render_comment(
        base_commit=base,
        current_commit=current_commit,
        toolchain=toolchain,
        snapshots=snapshots,
        owner=owner,
        repo=repo,
        compare_host=config.report.compare_host,
    )
    return snapshots, body


async def _publish(
    config: BloatReportConfig, issue: IssueContext, toolchain: str, body: str
) -> UpsertResult:
    async with CommentClient(config.github) as client:
        return await client.create_or_update_comment(issue, toolchain, body)


@click.group()
@click.version_option(version=__version__, prog_name="bloatreport")
@click.option("--verbose", "-v", is_flag=True, help="Log API calls and decisions.")
def main(verbose: bool):
    """bloatreport - binary size change reports for pull requests."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console.console, show_path=False)],
        )


_snapshot_args = [
    click.argument("snapshot_files", nargs=-1, required=True, type=click.Path(exists=True)),
    click.option("--toolchain", "-t", required=True, help="Toolchain label, e.g. x86_64-unknown-linux-gnu."),
    click.option("--commit", "-c", default=None, help="Current commit (default: $GITHUB_SHA)."),
    click.option("--base", "-b", default=None, help="Baseline commit, if one was measured."),
    click.option("--repository", "-r", default=None, help="owner/repo (default: $GITHUB_REPOSITORY)."),
    click.option("--config", "config_path", default=None, help="Path to the config file."),
]


def snapshot_options(func):
    for decorator in reversed(_snapshot_args):
        func = decorator(func)
    return func


@main.command()
@snapshot_options
@click.option("--output", "-o", default=None, help="Write the comment to a file instead of stdout.")
@click.option("--summary", is_flag=True, help="Show a size summary table.")
def render(
    snapshot_files: tuple[str, ...],
    toolchain: str,
    commit: str | None,
    base: str | None,
    repository: str | None,
    config_path: str | None,
    output: str | None,
    summary: bool,
):
    """Render the size report comment from snapshot difference JSON files."""
    config = _load_config(config_path)
    try:
        owner, repo = _resolve_repository(repository) if base else (None, None)
        snapshots, body = _build_comment(
            config, snapshot_files, toolchain, commit, base, owner, repo
        )
    except BloatReportError as e:
        console.error(str(e))
        sys.exit(1)

    if summary:
        console.show_snapshots(snapshots)

    if output:
        Path(output).write_text(body)
        console.success(f"Comment written to {output}")
    else:
        click.echo(body)


@main.command()
@snapshot_options
@click.option("--issue", "-i", default=None, type=int, help="Pull request number (default: from the event payload).")
@click.option("--dry-run", is_flag=True, help="Print the comment instead of posting it.")
def post(
    snapshot_files: tuple[str, ...],
    toolchain: str,
    commit: str | None,
    base: str | None,
    repository: str | None,
    config_path: str | None,
    issue: int | None,
    dry_run: bool,
):
    """Render the size report and create or update the pull request comment.

    Usage in CI:

        bloatreport post snapshots.json --toolchain "$TOOLCHAIN" --base "$BASE_SHA"
    """
    config = _load_config(config_path)
    try:
        context = _resolve_issue(repository, issue)
        snapshots, body = _build_comment(
            config, snapshot_files, toolchain, commit, base, context.owner, context.repo
        )
    except BloatReportError as e:
        console.error(str(e))
        sys.exit(1)

    console.show_snapshots(snapshots)

    if dry_run:
        click.echo(body)
        return

    if not config.github.token:
        console.error(f"Missing API token: set {config.github.token_env}")
        sys.exit(1)

    try:
        result = asyncio.run(_publish(config, context, toolchain, body))
    except BloatReportError as e:
        console.error(str(e))
        sys.exit(1)

    console.show_upsert(result)


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--config", "config_path", default=None, help="Path to the config file.")
def config_cmd(action: str, key: str | None, value: str | None, config_path: str | None):
    """Manage bloatreport configuration."""
    path = Path(config_path) if config_path else get_config_path()
    config = _load_config(str(path))

    if action == "show":
        click.echo(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: bloatreport config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        click.echo(f"{key} = {data}")
    elif action == "set":
        if not key or value is None:
            console.error("Usage: bloatreport config set <key> <value>")
            sys.exit(1)
        # Try to parse as JSON for non-string values
        try:
            parsed_value = json.loads(value)
        except json.JSONDecodeError:
            parsed_value = value
        try:
            config = set_config_value(config, key, parsed_value)
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except ConfigError as e:
            console.error(str(e))
            sys.exit(1)
        save_config(path, config)
        console.success(f"Set {key} = {parsed_value}")


if __name__ == "__main__":
    main()
