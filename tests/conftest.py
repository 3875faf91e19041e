"""Shared test fixtures for bloatreport."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from bloatreport.models import SnapshotDifference

SNAPSHOT_DATA: dict[str, Any] = {
    "packageName": "my-app",
    "currentSize": 2048,
    "oldSize": 1024,
    "sizeDifference": 1024,
    "currentTextSize": 1536,
    "oldTextSize": 1536,
    "textDifference": 0,
    "crateDifference": [
        {"name": "a", "old": 1000, "new": 1000},
        {"name": "b", "old": 500, "new": None},
        {"name": "c", "old": None, "new": 800},
        {"name": "d", "old": None, "new": None},
    ],
    "treeDiff": [
        {"value": "my-app v0.1.0\n├── a v1.0.0\n", "count": 2},
        {"value": "├── b v1.0.0\n", "removed": True, "count": 1},
        {"value": "└── c v2.0.0\n", "added": True, "count": 1},
    ],
    "oldDependenciesCount": 10,
    "newDependenciesCount": 12,
}


class FakeGitHub:
    """In-memory stand-in for the issue comment endpoints."""

    def __init__(self) -> None:
        self.comments: list[dict[str, Any]] = []
        self.list_status = 200
        self.list_body: Any = None
        self.write_status: int | None = None
        self.requests: list[httpx.Request] = []
        self.next_id = 1000

    def add_comment(self, comment_id: int, login: str, body: str) -> None:
        self.comments.append({"id": comment_id, "user": {"login": login}, "body": body})

    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in ("POST", "PATCH")]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            body = self.comments if self.list_body is None else self.list_body
            return httpx.Response(self.list_status, json=body)

        body = json.loads(request.content)["body"]
        if self.write_status is not None:
            return httpx.Response(self.write_status, json={"message": "nope"})
        if request.method == "POST":
            comment_id = self.next_id
            self.next_id += 1
            return httpx.Response(201, json={"id": comment_id, "body": body})
        comment_id = int(request.url.path.rsplit("/", 1)[-1])
        return httpx.Response(200, json={"id": comment_id, "body": body})


@pytest.fixture
def snapshot_data() -> dict[str, Any]:
    """Snapshot difference JSON as produced by the size measurement step."""
    return copy.deepcopy(SNAPSHOT_DATA)


@pytest.fixture
def snapshot(snapshot_data: dict[str, Any]) -> SnapshotDifference:
    return SnapshotDifference.model_validate(snapshot_data)


@pytest.fixture
def first_run_snapshot(snapshot_data: dict[str, Any]) -> SnapshotDifference:
    """A snapshot with no baseline measurements."""
    snapshot_data.update(
        packageName="first-run",
        oldSize=None,
        sizeDifference=0,
        oldTextSize=None,
        textDifference=0,
        crateDifference=[{"name": "a", "old": None, "new": 1000}],
        treeDiff="my-app v0.1.0\n",
        oldDependenciesCount=3,
        newDependenciesCount=3,
    )
    return SnapshotDifference.model_validate(snapshot_data)


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_data: dict[str, Any]) -> Path:
    path = tmp_path / "snapshots.json"
    path.write_text(json.dumps([snapshot_data]))
    return path


@pytest.fixture
def github_api() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def event_file(tmp_path: Path) -> Path:
    """A pull_request event payload as written by the CI runner."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"pull_request": {"number": 7}}))
    return path
