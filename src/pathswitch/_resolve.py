"""Match resolution — raw groups → MatchResult."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathswitch._template import CompiledPattern
    from pathswitch._types import Route


@dataclass(frozen=True, slots=True)
class MatchResult:
    """The outcome of a successful match.

    ``params`` maps ``"0"`` to the whole match and ``"1"``, ``"2"``, … to each
    capture, plus every template variable name to its capture. An optional
    segment that did not participate maps to None under both keys.

    INV: ``params[keys[i]] == params[str(i + 1)]`` for every key.
    """

    route: Route
    params: dict[str, str | None]
    sort_key: str
    pattern: Any

    @property
    def value(self) -> Any:
        """The matched route's payload."""
        return self.route.value

    @property
    def template(self) -> Any:
        """The matched route's pattern as registered."""
        return self.route.pattern


def resolve(compiled: CompiledPattern, groups: tuple[str | None, ...]) -> MatchResult:
    """Build the public result for a pattern and its matched groups.

    ``groups[0]`` is the whole match; named keys are 1-indexed into
    ``groups`` because group 0 is not a named capture.
    """
    params: dict[str, str | None] = {str(i): g for i, g in enumerate(groups)}
    for i, key in enumerate(compiled.keys):
        params[key] = groups[i + 1]
    return MatchResult(
        route=compiled.route,
        params=params,
        sort_key=compiled.sort_key,
        pattern=compiled.pattern,
    )
