"""Issue context: which repository and pull request a comment belongs to."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from bloatreport.exceptions import ContextError


@dataclass(frozen=True)
class IssueContext:
    """The issue or pull request being commented on."""
    owner: str
    repo: str
    number: int


def split_repository(repository: str) -> tuple[str, str]:
    """Split an ``owner/repo`` string."""
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise ContextError(f"Expected a repository of the form owner/repo, got {repository!r}")
    return owner, repo


def _event_issue_number(event_path: str) -> int | None:
    path = Path(event_path)
    if not path.exists():
        return None
    try:
        event = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ContextError(f"Could not parse event payload {event_path}: {e}") from e
    if not isinstance(event, dict):
        raise ContextError(f"Event payload {event_path} is not a JSON object")
    for key in ("pull_request", "issue"):
        number = (event.get(key) or {}).get("number")
        if number:
            return int(number)
    return None


def context_from_environment(
    env: Mapping[str, str] | None = None,
    issue_number: int | None = None,
) -> IssueContext:
    """Build the issue context from the CI environment.

    Reads ``GITHUB_REPOSITORY`` and, unless ``issue_number`` is given, the
    pull request or issue number from the event payload at
    ``GITHUB_EVENT_PATH``.
    """
    env = os.environ if env is None else env

    repository = env.get("GITHUB_REPOSITORY", "")
    if not repository:
        raise ContextError("GITHUB_REPOSITORY is not set")
    owner, repo = split_repository(repository)

    if issue_number is None:
        event_path = env.get("GITHUB_EVENT_PATH")
        if event_path:
            issue_number = _event_issue_number(event_path)
    if issue_number is None:
        raise ContextError(
            "Could not determine the pull request number. "
            "Run inside a pull_request workflow or pass --issue."
        )

    return IssueContext(owner=owner, repo=repo, number=issue_number)
