from __future__ import annotations

import logging
import os
import sys

import click
from rich.console import Console
from rich.markup import escape as rich_escape

from .config import OPTION_NAMES, CHECK_SECTION, Config, resolve_validation_config
from .exceptions import PRCheckError
from .formatters import format_github, format_json, format_markdown, format_terminal
from .github import fetch_pull_request, get_actor, load_event_pull_request
from .pr_check import NO_LIMIT, check_description, check_title
from .runner import PRChecker, RunOutcome

console = Console()

_FORMATTERS = {
    "terminal": format_terminal,
    "markdown": format_markdown,
    "json": format_json,
    "github": format_github,
}


def _enable_debug_logging() -> None:
    logging.basicConfig(level=logging.DEBUG, format="[DEBUG] %(message)s")
    logging.getLogger("conventional_pr_check").setLevel(logging.DEBUG)


def _emit(ctx: click.Context, outcome: RunOutcome) -> None:
    output = _FORMATTERS[ctx.obj["output_format"]](outcome)
    click.echo(output)
    if outcome.failed:
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--format", "output_format", default="terminal", type=click.Choice(list(_FORMATTERS)))
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--event", "event_path", default=None, help="Path to a pull_request event payload (default: $GITHUB_EVENT_PATH).")
@click.option("--repo", default=None, help="Fetch the PR from the GitHub API instead (owner/name).")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number, used with --repo.")
@click.pass_context
def main(
    ctx: click.Context,
    output_format: str,
    verbose: bool,
    event_path: str | None,
    repo: str | None,
    pr_number: int | None,
) -> None:
    """Check that a pull request title and description follow Conventional Commits."""
    ctx.ensure_object(dict)
    ctx.obj["output_format"] = output_format

    if verbose or os.environ.get("RUNNER_DEBUG") == "1":
        _enable_debug_logging()

    if ctx.invoked_subcommand is None:
        _check_pull_request(ctx, event_path, repo, pr_number)


def _check_pull_request(ctx: click.Context, event_path: str | None, repo: str | None, pr_number: int | None) -> None:
    environ = os.environ
    if (repo is None) != (pr_number is None):
        console.print("[bold red]--repo and --pr must be used together.[/]")
        sys.exit(1)

    try:
        validation_config = resolve_validation_config(Config(), environ)
        if repo:
            pr = fetch_pull_request(repo, pr_number, token=environ.get("GITHUB_TOKEN"))
            actor = pr.author
        else:
            pr = load_event_pull_request(event_path or environ.get("GITHUB_EVENT_PATH"))
            actor = get_actor(environ)
    except PRCheckError as e:
        console.print(f"[bold red]{rich_escape(str(e))}[/]")
        sys.exit(1)

    outcome = PRChecker(validation_config).run(pr, actor)

    summary_path = environ.get("GITHUB_STEP_SUMMARY")
    if summary_path:
        with open(summary_path, "a", encoding="utf-8") as f:
            f.write(format_markdown(outcome))

    _emit(ctx, outcome)


@main.command("title")
@click.argument("title")
@click.option("--max-len", type=int, default=NO_LIMIT, show_default=True, help="Maximum title length (-1 = unlimited).")
@click.pass_context
def title_cmd(ctx: click.Context, title: str, max_len: int) -> None:
    """Check a single pull request title."""
    result = check_title(title, max_len)
    _emit(ctx, RunOutcome(result=result, check=None if result.valid else "title"))


@main.command("description")
@click.argument("description_file", type=click.File("rb"), default="-")
@click.option("--required", is_flag=True, help="Fail when the description is empty.")
@click.option("--max-len", type=int, default=NO_LIMIT, show_default=True, help="Maximum description length (-1 = unlimited).")
@click.pass_context
def description_cmd(ctx: click.Context, description_file, required: bool, max_len: int) -> None:
    """Check a pull request description read from a file or stdin."""
    # Read bytes so \r\n line endings reach the checker unchanged.
    description = description_file.read().decode("utf-8")
    result = check_description(description, required, max_len)
    _emit(ctx, RunOutcome(result=result, check=None if result.valid else "description"))


def _load_config() -> Config:
    try:
        return Config()
    except PRCheckError as e:
        console.print(f"[bold red]{rich_escape(str(e))}[/]")
        sys.exit(1)


@main.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("set")
@click.argument("key", type=click.Choice(OPTION_NAMES))
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set a check option: pr-check config set <option> <value>"""
    config = _load_config()
    config.set(CHECK_SECTION, key, value)
    console.print(f"[green]Set {rich_escape(key)} = {rich_escape(value)}[/]")


@config_group.command("get")
@click.argument("key", type=click.Choice(OPTION_NAMES))
def config_get(key: str) -> None:
    """Get a check option: pr-check config get <option>"""
    config = _load_config()
    value = config.get(CHECK_SECTION, key)
    if value is None:
        console.print(f"[dim]{key} is not set[/]")
    else:
        console.print(rich_escape(value))


@config_group.command("show")
def config_show() -> None:
    """Show the effective check configuration."""
    config = _load_config()
    try:
        resolved = resolve_validation_config(config, os.environ)
    except PRCheckError as e:
        console.print(f"[bold red]{rich_escape(str(e))}[/]")
        sys.exit(1)

    console.print(f"[bold]{rich_escape('[' + CHECK_SECTION + ']')}[/]")
    for name, value in vars(resolved).items():
        if isinstance(value, tuple):
            value = ", ".join(value)
        console.print(f"  {rich_escape(name)} = {rich_escape(str(value))}")
