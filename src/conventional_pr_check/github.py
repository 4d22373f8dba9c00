from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import httpx

from .exceptions import GitHubError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    body: str
    author: str = ""

    @classmethod
    def from_payload(cls, data: Mapping) -> PullRequest:
        # GitHub sends null for an empty body
        return cls(
            number=int(data.get("number") or 0),
            title=data.get("title") or "",
            body=data.get("body") or "",
            author=(data.get("user") or {}).get("login", ""),
        )


def get_actor(environ: Mapping[str, str]) -> str:
    return environ.get("GITHUB_ACTOR", "")


def load_event_pull_request(event_path: str | Path | None) -> PullRequest:
    """Read the pull request from a GitHub Actions event payload file."""
    if not event_path:
        raise GitHubError("GITHUB_EVENT_PATH is not set; is this running inside GitHub Actions?")
    path = Path(event_path)
    try:
        event = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise GitHubError(f"Event payload not found: {path}") from e
    except json.JSONDecodeError as e:
        raise GitHubError(f"Event payload is not valid JSON: {path} ({e})") from e
    except UnicodeDecodeError as e:
        raise GitHubError(f"Event payload is not valid UTF-8: {path}") from e
    except OSError as e:
        raise GitHubError(f"Cannot read event payload {path}: {e.strerror or e}") from e

    pull_request = event.get("pull_request") if isinstance(event, dict) else None
    if not pull_request:
        raise GitHubError("Event payload has no pull_request; trigger the workflow on pull_request events")
    return PullRequest.from_payload(pull_request)


def fetch_pull_request(
    repo: str,
    number: int,
    token: str | None = None,
    api_url: str = DEFAULT_API_URL,
    timeout: float = 30.0,
) -> PullRequest:
    """Fetch a pull request through the GitHub REST API."""
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    url = f"{api_url.rstrip('/')}/repos/{repo}/pulls/{number}"
    logger.debug("Fetching %s", url)
    try:
        with httpx.Client(timeout=timeout, headers=headers) as client:
            resp = client.get(url)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise GitHubError(
            f"GitHub API returned {e.response.status_code} for {repo}#{number}"
        ) from e
    except httpx.HTTPError as e:
        raise GitHubError(f"Cannot reach GitHub API at {api_url}: {e}") from e
    return PullRequest.from_payload(resp.json())
