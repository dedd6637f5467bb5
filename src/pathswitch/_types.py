"""Core types shared across pathswitch.

- Route is the caller-facing input: a pattern plus an opaque payload
- PatternLike is the port for pre-built pattern objects (``re``/``re2``
  compiled patterns, or anything exposing ``search``)
- RouterError is the root of the exception taxonomy
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class RouterError(Exception):
    """Base class for all pathswitch errors."""


@runtime_checkable
class PatternLike(Protocol):
    """A pre-built pattern object.

    ``search`` returns ``None`` on no match, or a match object exposing
    ``group(0)`` and ``groups()``.
    """

    def search(self, string: str, /) -> Any: ...


@dataclass(frozen=True, slots=True, eq=False)
class Route:
    """A pattern and the value returned when it matches.

    Routes compare by identity: a Route is the back-reference carried by
    compiled patterns and match results, and removal targets that exact
    registration.
    """

    pattern: str | PatternLike | None
    value: Any = None

    @classmethod
    def coerce(cls, obj: Route | Mapping[str, Any]) -> Route:
        """Accept a Route, or a mapping with ``pattern`` and ``value``.

        ``methods`` is accepted in place of ``value``, which is the shape
        produced from handler descriptors.
        """
        if isinstance(obj, Route):
            return obj
        if isinstance(obj, Mapping):
            value = obj["value"] if "value" in obj else obj.get("methods")
            return cls(pattern=obj.get("pattern"), value=value)
        msg = f"expected a Route or a mapping with 'pattern', got {type(obj).__name__}"
        raise TypeError(msg)
