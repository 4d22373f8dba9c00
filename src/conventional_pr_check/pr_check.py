from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

COMMIT_TYPES = (
    "feat", "fix", "docs", "style", "refactor", "perf",
    "test", "build", "ci", "chore", "revert",
)

# Any character except a line terminator (\n, \r, U+2028, U+2029).
_LINE_CHAR = r"[^\n\r\u2028\u2029]"

# Anchored at the start only: trailing text past the 50-char subject is
# left for the max-length check to catch.
_TITLE_PATTERN = re.compile(
    rf"^({'|'.join(COMMIT_TYPES)})(\({_LINE_CHAR}+\))?!?: {_LINE_CHAR}{{1,50}}"
)

_FOOTER_PATTERN = re.compile(rf"^[\w-]+: {_LINE_CHAR}+\Z", re.ASCII)
_BREAKING_CHANGE_PATTERN = re.compile(rf"^BREAKING CHANGE: {_LINE_CHAR}+\Z")

NO_LIMIT = -1


class ErrorKind(Enum):
    TITLE_TOO_LONG = "Pull request title is too long."
    INVALID_TITLE_FORMAT = "Pull request title does not follow conventional commits format."
    DESCRIPTION_TOO_LONG = "Pull request description is too long."
    DESCRIPTION_MISSING = "Pull request description is required but was not found."
    INVALID_FOOTER_FORMAT = "Footer in pull request description does not match conventional commits standard."

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class CheckResult:
    valid: bool
    error: ErrorKind | None = None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None


_OK = CheckResult(valid=True)


def _fail(kind: ErrorKind) -> CheckResult:
    return CheckResult(valid=False, error=kind)


def _too_long(text: str, max_len: int) -> bool:
    return max_len != NO_LIMIT and len(text) > max_len


def check_title(title: str, max_len: int = NO_LIMIT) -> CheckResult:
    """Check a pull request title against the Conventional Commits header.

    The length check runs first so an overlong title reports TITLE_TOO_LONG
    even when it would also fail the format check. ``max_len`` of -1 means
    unlimited; any other negative value is compared as is.
    """
    if _too_long(title, max_len):
        return _fail(ErrorKind.TITLE_TOO_LONG)
    if not _TITLE_PATTERN.match(title):
        return _fail(ErrorKind.INVALID_TITLE_FORMAT)
    return _OK


def check_description(description: str, required: bool = False, max_len: int = NO_LIMIT) -> CheckResult:
    """Check a pull request description and the footer lines it carries.

    Everything after the first empty line is treated as the footer block:
    each non-empty line there must be a ``token: value`` trailer or a
    ``BREAKING CHANGE: ...`` line.
    """
    if _too_long(description, max_len):
        return _fail(ErrorKind.DESCRIPTION_TOO_LONG)

    if description == "" and required:
        return _fail(ErrorKind.DESCRIPTION_MISSING)

    lines = description.split("\n")

    if len(lines) == 1:
        if required and not lines[0].strip():
            return _fail(ErrorKind.DESCRIPTION_MISSING)
        return _OK

    try:
        blank_index = lines.index("")
    except ValueError:
        if required:
            return _fail(ErrorKind.DESCRIPTION_MISSING)
        return _OK

    for line in lines[blank_index + 1:]:
        if not line:
            continue
        if not _FOOTER_PATTERN.match(line) and not _BREAKING_CHANGE_PATTERN.match(line):
            return _fail(ErrorKind.INVALID_FOOTER_FORMAT)
    return _OK
