from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import ValidationConfig
from .github import PullRequest
from .pr_check import CheckResult, ErrorKind, check_description, check_title

logger = logging.getLogger(__name__)

EXTENDED_TITLE_ERROR = (
    "Pull request title does not follow conventional commits format, e.g.\n"
    "\nfeat(api): send an email to the customer when a product is shipped.\n"
    "\nHere is the link to the conventional commits doc for your convenience:\n"
    "https://www.conventionalcommits.org/en/v1.0.0/\n"
)


def failure_message(result: CheckResult) -> str | None:
    if result.valid:
        return None
    if result.error is ErrorKind.INVALID_TITLE_FORMAT:
        return EXTENDED_TITLE_ERROR
    return result.message


@dataclass(frozen=True)
class RunOutcome:
    result: CheckResult
    check: str | None = None
    skipped: bool = False

    @property
    def failed(self) -> bool:
        return not self.result.valid

    @property
    def message(self) -> str | None:
        return failure_message(self.result)


_PASSED = CheckResult(valid=True)


class PRChecker:
    def __init__(self, config: ValidationConfig) -> None:
        self._config = config

    @property
    def config(self) -> ValidationConfig:
        return self._config

    def run(self, pr: PullRequest, actor: str = "") -> RunOutcome:
        config = self._config
        logger.debug("Title: %s", pr.title)
        logger.debug("Body: %s", pr.body)

        if pr.title == "":
            logger.debug("Title of pull request is empty. External change broke the check")

        if config.ignored_contributors:
            logger.debug("Ignored contributors: %d", len(config.ignored_contributors))

        if actor and config.is_ignored(actor):
            logger.debug("Ignoring actor %s", actor)
            return RunOutcome(result=_PASSED, skipped=True)

        if config.title_check_enabled:
            logger.debug("Checking the pull request title")
            result = check_title(pr.title, config.title_max_len)
            if not result.valid:
                logger.debug("Title check failed: %s", result.error.name)
                return RunOutcome(result=result, check="title")

        if config.description_check_enabled:
            logger.debug("Checking the pull request description")
            result = check_description(pr.body, config.description_required, config.description_max_len)
            if not result.valid:
                logger.debug("Description check failed: %s", result.error.name)
                return RunOutcome(result=result, check="description")

        return RunOutcome(result=_PASSED)
