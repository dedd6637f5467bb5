"""CombinedMatcher — one dispatch operation over ordered compiled patterns.

Consecutive patterns that have a regex ``source`` are merged into a single
RE2 alternation::

    ^(?:(tmpl₁$)|(?s:.*?)(raw₂)|(tmpl₃$)|…)

Each branch opens with a capturing wrapper group; the wrapper that
participated identifies the winning pattern, and its group number is the
offset of that pattern's own groups. RE2 resolves alternations
leftmost-first, so one pass returns exactly what trying each pattern in
order would.

Pattern objects cannot be merged and are tried on their own, in place. A run
RE2 refuses to compile as one regex (memory budget, colliding group names)
falls back to per-pattern trial.

INV: first-match-wins in table order — later patterns are never consulted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

import re2

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from pathswitch._template import CompiledPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawMatch:
    """The winning pattern's position and its groups.

    ``groups[0]`` is the whole match; ``groups[i + 1]`` belongs to
    ``keys[i]`` for templates, or to regex group ``i + 1`` otherwise.
    """

    index: int
    groups: tuple[str | None, ...]


@dataclass(frozen=True, slots=True)
class _Alternation:
    regex: Any
    # (entry index, wrapper group number), in dispatch order
    branches: tuple[tuple[int, int], ...]


@dataclass(frozen=True, slots=True)
class _Single:
    index: int


_Segment: TypeAlias = _Alternation | _Single


class CombinedMatcher:
    """Dispatch a path across ordered compiled patterns in one pass."""

    __slots__ = ("_entries", "_segments")

    def __init__(self, entries: Sequence[CompiledPattern]) -> None:
        self._entries = tuple(entries)
        self._segments = tuple(_plan(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def segment_count(self) -> int:
        """Number of regex passes a miss costs."""
        return len(self._segments)

    def match(self, path: str) -> RawMatch | None:
        """Return the first pattern matching ``path``, or None."""
        for segment in self._segments:
            match segment:
                case _Alternation(regex=regex, branches=branches):
                    m = regex.match(path)
                    if m is None:
                        continue
                    for index, group in branches:
                        if m.group(group) is not None:
                            entry = self._entries[index]
                            return RawMatch(index, entry.groups_from(m, group))
                case _Single(index=index):
                    groups = self._entries[index].search(path)
                    if groups is not None:
                        return RawMatch(index, groups)
        return None


def _plan(entries: tuple[CompiledPattern, ...]) -> Iterator[_Segment]:
    run: list[int] = []
    for index, entry in enumerate(entries):
        if entry.source is not None:
            run.append(index)
            continue
        yield from _combine(entries, run)
        run = []
        yield _Single(index)
    yield from _combine(entries, run)


def _combine(entries: tuple[CompiledPattern, ...], run: list[int]) -> list[_Segment]:
    if len(run) < 2:
        return [_Single(index) for index in run]

    branches: list[tuple[int, int]] = []
    parts: list[str] = []
    group = 1
    for index in run:
        entry = entries[index]
        parts.append(entry.alternative())
        branches.append((index, group))
        group += 1 + entry.group_count

    try:
        regex = re2.compile("^(?:" + "|".join(parts) + ")")
    except re2.error as e:
        logger.debug(
            "combined regex over %d patterns rejected (%s); trying them one by one",
            len(run),
            e,
        )
        return [_Single(index) for index in run]
    return [_Alternation(regex=regex, branches=tuple(branches))]
