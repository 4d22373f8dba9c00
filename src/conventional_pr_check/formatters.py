from __future__ import annotations

import io
import json

from rich.console import Console
from rich.markup import escape as rich_escape

from .runner import RunOutcome


def _status(outcome: RunOutcome) -> str:
    if outcome.skipped:
        return "skipped"
    return "failed" if outcome.failed else "passed"


def format_terminal(outcome: RunOutcome) -> str:
    buf = io.StringIO()
    console = Console(file=buf, force_terminal=False)

    if outcome.skipped:
        console.print("\u23ed\ufe0f  Author is in ignored contributors, checks skipped")
    elif outcome.failed:
        console.print(f"\u274c Pull request {outcome.check} check failed")
        console.print(rich_escape(outcome.message))
    else:
        console.print("\u2705 Pull request follows conventional commits")
    return buf.getvalue()


def format_markdown(outcome: RunOutcome) -> str:
    lines = ["# Conventional PR Check\n"]
    status = _status(outcome)
    lines.append(f"**Status:** {status}")
    if outcome.failed:
        lines.append(f"**Check:** {outcome.check}")
        lines.append("")
        lines.append("```")
        lines.append(outcome.message.rstrip("\n"))
        lines.append("```")
    return "\n".join(lines) + "\n"


def format_json(outcome: RunOutcome) -> str:
    error = outcome.result.error
    data = {
        "status": _status(outcome),
        "check": outcome.check,
        "error": error.name if error else None,
        "message": outcome.message,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_github(outcome: RunOutcome) -> str:
    """Render the outcome as GitHub Actions workflow commands."""
    if outcome.skipped:
        return "::notice::Author is in ignored contributors, skipping checks"
    if outcome.failed:
        return f"::error::{_escape_command_data(outcome.message)}"
    return "::notice::Pull request follows conventional commits"
