"""RouteTable — immutable, ordered, de-duplicated set of compiled routes.

Every registration is kept in ``compiled`` (registration order). The live
dispatch order in ``entries`` is derived from it on construction:

1. stable sort by ``sort_key`` ascending (plain ``str`` ordering)
2. collapse each run of equal sort keys to its last registration
3. build the CombinedMatcher over the survivors

The ordering is lexical over the canonical template, not a specificity
ranking: ``/users/{}`` precedes ``/{}/new`` because ``u`` < ``{``.

Mutations never touch an existing table. ``add``/``extend``/``remove``
compile first and return a new table, so a failed mutation leaves the
caller's table valid and readers never observe a half-built one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pathswitch._matcher import CombinedMatcher
from pathswitch._resolve import resolve
from pathswitch._template import compile_route
from pathswitch._types import Route

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

    from pathswitch._resolve import MatchResult
    from pathswitch._template import CompiledPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RouteTable:
    """Compiled routes in dispatch order.

    INV: every sort key identifies at most one live entry.
    """

    compiled: tuple[CompiledPattern, ...] = ()
    entries: tuple[CompiledPattern, ...] = field(init=False)
    matcher: CombinedMatcher = field(init=False, repr=False)

    def __post_init__(self) -> None:
        entries = _collapse(sorted(self.compiled, key=_by_sort_key))
        object.__setattr__(self, "entries", entries)
        object.__setattr__(self, "matcher", CombinedMatcher(entries))
        logger.debug(
            "route table rebuilt: %d registered, %d live, %d shadowed",
            len(self.compiled),
            len(entries),
            len(self.compiled) - len(entries),
        )

    @classmethod
    def build(cls, routes: Iterable[Route | Mapping[str, Any]]) -> RouteTable:
        """Compile every route into a new table.

        All-or-nothing: the first invalid pattern raises and no table is
        produced.

        Raises:
            InvalidPatternError: a route's pattern is absent or invalid
        """
        return cls(tuple(compile_route(Route.coerce(r)) for r in routes))

    @property
    def routes(self) -> tuple[Route, ...]:
        """Every registered route, shadowed ones included, in registration order."""
        return tuple(c.route for c in self.compiled)

    def add(self, route: Route | Mapping[str, Any]) -> RouteTable:
        """Return a new table with ``route`` registered last."""
        return self.extend((route,))

    def extend(self, routes: Iterable[Route | Mapping[str, Any]]) -> RouteTable:
        """Return a new table with ``routes`` registered last, in order."""
        added = tuple(compile_route(Route.coerce(r)) for r in routes)
        return RouteTable(self.compiled + added)

    def remove(self, predicate: Callable[[Route], bool]) -> RouteTable:
        """Return a new table without registrations whose route satisfies ``predicate``.

        Removing a live entry exposes the most recent remaining
        registration with the same sort key, if any.
        """
        kept = tuple(c for c in self.compiled if not predicate(c.route))
        if len(kept) == len(self.compiled):
            return self
        return RouteTable(kept)

    def match(self, path: str) -> MatchResult | None:
        """Match ``path``; None when no route matches."""
        raw = self.matcher.match(path)
        if raw is None:
            return None
        return resolve(self.entries[raw.index], raw.groups)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CompiledPattern]:
        return iter(self.entries)


def _by_sort_key(compiled: CompiledPattern) -> str:
    return compiled.sort_key


def _collapse(ordered: list[CompiledPattern]) -> tuple[CompiledPattern, ...]:
    survivors: list[CompiledPattern] = []
    for entry in ordered:
        if survivors and survivors[-1].sort_key == entry.sort_key:
            # Stable sort keeps registration order within a run: last wins.
            survivors[-1] = entry
        else:
            survivors.append(entry)
    return tuple(survivors)
