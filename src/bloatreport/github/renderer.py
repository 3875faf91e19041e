"""Markdown renderer for size report comments.

Generates GitHub-flavored markdown with:
  - Total and text section size table
  - Per-crate size breakdown (collapsible)
  - Dependency tree diff (collapsible)

Tables live inside ```diff fences so rows starting with ``+`` and ``-``
render as additions and removals.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from bloatreport.models import ChangeKind, SnapshotDifference, TreeDiff

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

DEFAULT_MARKER = "crab"


def _contains(key: str) -> Callable[[str], bool]:
    return lambda toolchain: key in toolchain


# Checked in order, first match wins.
MARKERS: tuple[tuple[Callable[[str], bool], str], ...] = (
    (_contains("apple"), "apple"),
    (_contains("windows"), "office"),
    (_contains("arm"), "muscle"),
    (_contains("linux"), "cowboy_hat_face"),
)

_CHANGE_PREFIX = {
    ChangeKind.ADDED: "+",
    ChangeKind.REMOVED: "-",
    ChangeKind.UNCHANGED: " ",
}


def human_size(size: int) -> str:
    """Format a byte count with binary prefixes, e.g. ``1.5 KB``."""
    value = float(abs(size))
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    value = round(value, 2)
    if value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    sign = "-" if size < 0 else ""
    return f"{sign}{number} {SIZE_UNITS[unit]}"


def should_include_in_diff(new: int, old: int | None) -> bool:
    """Whether a size pair is shown as a removed/added diff.

    Without a baseline value (first run) there is nothing to compare.
    """
    if old is None:
        return False
    return new != old


def align_table(rows: Sequence[Sequence[str]]) -> str:
    """Align rows into a plain text table, padding each column to its widest cell."""
    if not rows:
        return ""
    column_count = max(len(row) for row in rows)
    padded = [list(row) + [""] * (column_count - len(row)) for row in rows]
    widths = [max(len(row[i]) for row in padded) for i in range(column_count)]
    return "\n".join(
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in padded
    )


def _signed_size(delta: int) -> str:
    return f"+{human_size(delta)}" if delta > 0 else human_size(delta)


def crate_rows(diff: SnapshotDifference) -> list[tuple[str, str]]:
    """Rows of the per-crate breakdown table."""
    rows: list[tuple[str, str]] = []
    for crate in diff.crate_difference:
        if crate.old is None and crate.new is None:
            continue
        if crate.old == crate.new:
            rows.append((crate.name, human_size(crate.new)))
            continue
        if crate.old is not None:
            rows.append((f"- {crate.name}", human_size(crate.old)))
        if crate.new is not None:
            rows.append((f"+ {crate.name}", human_size(crate.new)))
    return rows


def _size_pair_rows(
    label: str, current: int, old: int | None, delta: int
) -> list[tuple[str, str, str]]:
    if should_include_in_diff(current, old):
        return [
            (f"- {label}", human_size(old), ""),
            (f"+ {label}", human_size(current), _signed_size(delta)),
        ]
    return [(label, human_size(current), "")]


def size_rows(diff: SnapshotDifference) -> list[tuple[str, str, str]]:
    """Rows of the total and text section size table."""
    return _size_pair_rows(
        "Size", diff.current_size, diff.old_size, diff.size_difference
    ) + _size_pair_rows(
        "Text size", diff.current_text_size, diff.old_text_size, diff.text_difference
    )


def render_tree_diff(tree: TreeDiff) -> str:
    """Render a dependency tree diff with ``+``/``-``/space line prefixes."""
    if tree.kind == "raw":
        return tree.text

    blocks: list[str] = []
    for segment in tree.segments:
        prefix = _CHANGE_PREFIX[segment.kind]
        lines = segment.value.split("\n")[:-1]
        blocks.append("\n".join(f"{prefix} {line}" for line in lines) + "\n")
    return "".join(blocks) + "\n"


def render_dependency_count(old: int, new: int) -> str:
    if old == new:
        return f"Count: {old}"
    return f"- Count: {old}\n+ Count: {new}"


def render_snapshot(diff: SnapshotDifference) -> str:
    """Render one snapshot difference as a self-contained markdown fragment."""
    crate_table_rows = crate_rows(diff)
    size_table = align_table(size_rows(diff))

    if not crate_table_rows:
        crate_details = "No changes to crate sizes"
    else:
        crate_details = (
            "\n<details>\n"
            "<summary>Size difference per crate</summary>\n"
            "<br />\n\n"
            "**Note:** The numbers below are not 100% accurate, "
            "use them as a rough estimate.\n\n"
            "```diff\n"
            "@@ Breakdown per crate @@\n\n"
            f"{align_table(crate_table_rows)}\n"
            "```\n\n"
            "</details>\n"
        )

    dependency_count = render_dependency_count(
        diff.old_dependencies_count, diff.new_dependencies_count
    )
    tree_details = (
        "\n<details>\n"
        "<summary>Dependency tree</summary>\n"
        "<br />\n\n"
        "```diff\n"
        "@@ Dependency tree @@\n"
        f"{dependency_count}\n\n"
        f"{render_tree_diff(diff.tree_diff)}\n"
        "```\n\n"
        "</details>\n"
    )

    return (
        "\n```diff\n"
        "@@ Size breakdown @@\n\n"
        f"{size_table}\n\n"
        "```\n\n"
        f"{crate_details}\n\n"
        f"{tree_details}\n"
    )


def select_marker(toolchain: str) -> str:
    """Pick the decorative emoji name for a toolchain label."""
    for matches, marker in MARKERS:
        if matches(toolchain):
            return marker
    return DEFAULT_MARKER


def compare_url(host: str, owner: str, repo: str, base_commit: str, current_commit: str) -> str:
    return f"{host.rstrip('/')}/{owner}/{repo}/compare/{base_commit}..{current_commit}"


def _snapshot_section(snapshot: SnapshotDifference) -> str:
    warning = (
        " (Changes :warning:)"
        if should_include_in_diff(snapshot.current_size, snapshot.old_size)
        else ""
    )
    return (
        "<details>\n"
        f"<summary><strong>{snapshot.package_name}</strong>{warning}</summary>\n"
        "<br />\n"
        f"{render_snapshot(snapshot)}\n"
        "</details>"
    )


def render_comment(
    base_commit: str | None,
    current_commit: str,
    toolchain: str,
    snapshots: Sequence[SnapshotDifference],
    owner: str | None = None,
    repo: str | None = None,
    compare_host: str = "https://github.com",
) -> str:
    """Render the full size report comment for one toolchain.

    A single snapshot is inlined; several snapshots each get their own
    collapsible section, in input order.

    Raises:
        ValueError: If ``snapshots`` is empty, or a baseline commit is given
            without the owner and repo needed for the compare link.
    """
    if not snapshots:
        raise ValueError("At least one snapshot is required to render a comment")

    marker = select_marker(toolchain)

    compare_text = ""
    if base_commit is not None:
        if not owner or not repo:
            raise ValueError("owner and repo are required to link to the baseline commit")
        url = compare_url(compare_host, owner, repo, base_commit, current_commit)
        compare_text = f"([Compare with baseline commit]({url}))"

    if len(snapshots) == 1:
        inner = render_snapshot(snapshots[0])
    else:
        inner = "\n".join(_snapshot_section(snapshot) for snapshot in snapshots)

    footer = f"Commit: {current_commit} {compare_text}".rstrip()
    return (
        f"\n:{marker}: Cargo bloat for toolchain **{toolchain}** :{marker}:\n\n"
        f"{inner}\n\n"
        f"{footer}\n"
    )
