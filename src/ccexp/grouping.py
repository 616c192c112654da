"""Grouping and live filtering of scanned records.

Both operations are pure: they take records or groups and return new lists,
never mutating their input.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from .types import FileKind, FileRecord, Group

# Fixed group precedence
KIND_ORDER: tuple[FileKind, ...] = (
    FileKind.PROJECT_CONFIG,
    FileKind.LOCAL_OVERRIDE,
    FileKind.GLOBAL_CONFIG,
    FileKind.COMMAND_DEFINITION,
    FileKind.SETTINGS,
    FileKind.SETTINGS_LOCAL,
    FileKind.UNKNOWN,
)


def record_sort_key(record: FileRecord) -> tuple[str, str]:
    """Canonical in-group order: case-folded file name, then full path."""
    return (record.name.casefold(), str(record.path))


def build_groups(
    records: Iterable[FileRecord],
    expanded: Mapping[FileKind, bool] | None = None,
) -> list[Group]:
    """Bucket records into one group per kind present, in KIND_ORDER.

    Args:
        records: Records from one scan.
        expanded: Expansion flags from a previous build, keyed by kind.
            Kinds not in the map start expanded.
    """
    expanded = expanded or {}
    buckets: dict[FileKind, list[FileRecord]] = {}
    for record in records:
        buckets.setdefault(record.kind, []).append(record)

    return [
        Group(
            kind=kind,
            records=tuple(sorted(buckets[kind], key=record_sort_key)),
            expanded=expanded.get(kind, True),
        )
        for kind in KIND_ORDER
        if buckets.get(kind)
    ]


def expansion_state(groups: Iterable[Group]) -> dict[FileKind, bool]:
    return {group.kind: group.expanded for group in groups}


def toggle_group(groups: list[Group], kind: FileKind) -> list[Group]:
    """Return a copy of groups with one group's expanded flag flipped."""
    return [
        replace(group, expanded=not group.expanded) if group.kind == kind else group
        for group in groups
    ]


def matches(record: FileRecord, query: str) -> bool:
    """Case-insensitive substring match on file name or full path."""
    needle = query.casefold()
    return needle in record.name.casefold() or needle in str(record.path).casefold()


def filter_groups(groups: list[Group], query: str) -> list[Group]:
    """Narrow groups to records matching query; empty groups are dropped.

    An empty query returns the input list itself.
    """
    if not query:
        return groups

    filtered = []
    for group in groups:
        kept = tuple(r for r in group.records if matches(r, query))
        if kept:
            filtered.append(replace(group, records=kept))
    return filtered
