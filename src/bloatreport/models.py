"""Snapshot difference data model.

A ``SnapshotDifference`` describes one build configuration (usually one
toolchain or package) compared against its baseline. The numbers are
computed elsewhere and handed in as JSON, so every model accepts both the
camelCase keys of that JSON and the snake_case field names.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from bloatreport.exceptions import SnapshotError


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class CrateDifference(_Model):
    """Size of one crate before and after. ``None`` means absent on that side."""

    name: str
    old: int | None = None
    new: int | None = None


class ChangeKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class TreeDiffSegment(_Model):
    """A run of newline-terminated lines sharing the same change kind."""

    kind: ChangeKind = ChangeKind.UNCHANGED
    value: str

    @model_validator(mode="before")
    @classmethod
    def _from_line_diff(cls, data: Any) -> Any:
        # Line diff tools emit {"value": ..., "added": bool, "removed": bool}
        if isinstance(data, dict) and "kind" not in data:
            if data.get("added"):
                kind = ChangeKind.ADDED
            elif data.get("removed"):
                kind = ChangeKind.REMOVED
            else:
                kind = ChangeKind.UNCHANGED
            return {"kind": kind, "value": data.get("value", "")}
        return data


class RawTreeDiff(_Model):
    """Dependency tree diff already formatted by the producer."""

    kind: Literal["raw"] = "raw"
    text: str = ""


class SegmentedTreeDiff(_Model):
    """Dependency tree diff as a sequence of tagged line segments."""

    kind: Literal["segments"] = "segments"
    segments: list[TreeDiffSegment] = Field(default_factory=list)


TreeDiff = Annotated[Union[RawTreeDiff, SegmentedTreeDiff], Field(discriminator="kind")]


class SnapshotDifference(_Model):
    """One snapshot compared against its baseline."""

    package_name: str
    current_size: int
    old_size: int | None = None
    size_difference: int = 0
    current_text_size: int
    old_text_size: int | None = None
    text_difference: int = 0
    crate_difference: list[CrateDifference] = Field(default_factory=list)
    tree_diff: TreeDiff = Field(default_factory=RawTreeDiff)
    old_dependencies_count: int = 0
    new_dependencies_count: int = 0

    @field_validator("tree_diff", mode="before")
    @classmethod
    def _tag_tree_diff(cls, value: Any) -> Any:
        """Resolve a bare string or segment list into its tagged variant."""
        if isinstance(value, str):
            return {"kind": "raw", "text": value}
        if isinstance(value, (list, tuple)):
            return {"kind": "segments", "segments": list(value)}
        return value


_SNAPSHOT_LIST = TypeAdapter(list[SnapshotDifference])


def load_snapshots(path: Path) -> list[SnapshotDifference]:
    """Load snapshot differences from a JSON file.

    The file holds either a single snapshot object or a list of them.

    Raises:
        SnapshotError: If the file is unreadable, not JSON, empty, or does
            not describe snapshot differences.
    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Could not read snapshot file {path}: {e}") from e

    if isinstance(data, dict):
        data = [data]

    try:
        snapshots = _SNAPSHOT_LIST.validate_python(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot data in {path}: {e}") from e

    if not snapshots:
        raise SnapshotError(f"No snapshots found in {path}")
    return snapshots
