"""Line diff of an edit's before/after text by common prefix/suffix reduction.

Cheap and deterministic: moved or reordered lines inside the changed region
show up as one removed block followed by one added block.
"""

from __future__ import annotations

from ccshare.models.diff import DiffLine, DiffLineType, DiffStats


def split_lines(text: str) -> list[str]:
    """Split on newlines; an empty blob has no lines."""
    return text.split("\n") if text else []


def compute_diff(before: str, after: str) -> list[DiffLine]:
    old_lines = split_lines(before)
    new_lines = split_lines(after)

    prefix_len = 0
    while (
        prefix_len < len(old_lines)
        and prefix_len < len(new_lines)
        and old_lines[prefix_len] == new_lines[prefix_len]
    ):
        prefix_len += 1

    # Bounded so the suffix never overlaps the prefix.
    max_suffix = min(len(old_lines), len(new_lines)) - prefix_len
    suffix_len = 0
    while (
        suffix_len < max_suffix
        and old_lines[len(old_lines) - 1 - suffix_len] == new_lines[len(new_lines) - 1 - suffix_len]
    ):
        suffix_len += 1

    lines = [DiffLine(type=DiffLineType.CONTEXT, text=line) for line in old_lines[:prefix_len]]
    lines.extend(
        DiffLine(type=DiffLineType.REMOVED, text=line)
        for line in old_lines[prefix_len : len(old_lines) - suffix_len]
    )
    lines.extend(
        DiffLine(type=DiffLineType.ADDED, text=line)
        for line in new_lines[prefix_len : len(new_lines) - suffix_len]
    )
    lines.extend(
        DiffLine(type=DiffLineType.CONTEXT, text=line)
        for line in old_lines[len(old_lines) - suffix_len :]
    )
    return lines


def diff_stats(lines: list[DiffLine]) -> DiffStats:
    return DiffStats(
        added=sum(1 for line in lines if line.type == DiffLineType.ADDED),
        removed=sum(1 for line in lines if line.type == DiffLineType.REMOVED),
    )


def format_diff(lines: list[DiffLine]) -> str:
    """Plain-text rendering with ``+``/``-``/space prefixes."""
    prefixes = {DiffLineType.ADDED: "+", DiffLineType.REMOVED: "-", DiffLineType.CONTEXT: " "}
    return "\n".join(f"{prefixes[line.type]}{line.text}" for line in lines)
