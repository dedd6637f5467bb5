"""Template compiler — route pattern → CompiledPattern.

Three pattern forms are accepted:

- URI templates in a restricted RFC 6570 style: ``{name}`` matches one path
  segment, ``{+name}`` (reserved expansion) may span ``/``, and ``{/name}``
  is an optional ``/value`` segment
- raw regex literals: ``re:/<body>/<flags>``
- pre-built pattern objects exposing ``search(str)``

Generated regexes are compiled with ``google-re2`` for guaranteed linear-time
matching. RE2 has no lookahead, so the rule that ``{name}`` and ``{/name}``
captures end at a segment boundary (next char is ``/`` or end of path) is
enforced while the regex is assembled rather than by an assertion.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

import re2

from pathswitch._types import Route, RouterError

if TYPE_CHECKING:
    from pathswitch._types import PatternLike

logger = logging.getLogger(__name__)

MAX_TEMPLATE_LENGTH = 8192
MAX_REGEX_PATTERN_LENGTH = 4096

# Template grammar. These parse trusted, fixed syntax; only generated and
# user-supplied match patterns go through re2.
_TOKEN = re.compile(r"\{([+/]?)([a-zA-Z0-9_]+)\}")
_SORT_TOKEN = re.compile(r"\{([+/]?)[^}]+\}")
_RAW_REGEX = re.compile(r"re:/(.*)/([a-zA-Z]*)")

_INLINE_FLAGS = frozenset("ims")
_IGNORED_FLAGS = frozenset("gu")
# Sticky: match only at the start of the path.
_STICKY_FLAG = "y"

# Reserved expansion spans "/" but no line terminator.
_RESERVED_CHAR = r"[^\n\r\x{2028}\x{2029}]"

# Negated full code point range: an empty class, never matches.
_NEVER = r"[^\x00-\x{10FFFF}]"

PatternKind: TypeAlias = Literal["template", "regex", "object"]


# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class InvalidPatternError(RouterError):
    """A route pattern is absent, malformed, or unusable as a matcher."""

    def __init__(self, pattern: object, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid route pattern {pattern!r}: {reason}")


class PatternTooLongError(InvalidPatternError):
    """A template or raw regex exceeds the length limit."""

    def __init__(self, pattern: object, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(pattern, f"length {length} exceeds maximum {max_}")


# ═══════════════════════════════════════════════════════════════════════════════
# Compiled pattern
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A route compiled for dispatch.

    ``source`` is the unanchored regex usable as one branch of a combined
    alternation; it is None for pattern objects, which can only be tried on
    their own. ``group_keys[j]`` is the index into ``keys`` captured by
    regex group ``j + 1`` (templates only). A key may own several groups when
    an optional segment forces an alternation; the first group that
    participated wins.
    """

    pattern: Any
    keys: tuple[str, ...]
    sort_key: str
    route: Route
    kind: PatternKind = "template"
    source: str | None = None
    group_keys: tuple[int, ...] = ()

    @property
    def template(self) -> Any:
        """The pattern exactly as the caller registered it."""
        return self.route.pattern

    @property
    def group_count(self) -> int:
        """Number of capture groups ``source`` contributes to an alternation."""
        if self.kind == "template":
            return len(self.group_keys)
        if self.kind == "regex":
            return self.pattern.groups
        return 0

    def alternative(self) -> str:
        """Regex source for this pattern as one branch of a combined regex.

        The branch opens with a capturing group spanning its whole match.
        Templates are anchored at the end; raw regexes get a lazy prefix so a
        single anchored pass finds the same match ``search`` would.
        """
        if self.source is None:
            msg = f"pattern {self.template!r} cannot join a combined regex"
            raise ValueError(msg)
        if self.kind == "template":
            return f"({self.source}$)"
        return f"(?s:.*?)({self.source})"

    def search(self, path: str) -> tuple[str | None, ...] | None:
        """Match this pattern alone; return group 0 plus key-ordered groups."""
        m = self.pattern.search(path)
        if m is None:
            return None
        if self.kind == "object":
            return (m.group(0), *m.groups())
        return self.groups_from(m, 0)

    def groups_from(self, m: Any, offset: int) -> tuple[str | None, ...]:
        """Extract groups from a match where this pattern's group 0 is ``offset``."""
        whole = m.group(offset)
        if self.kind != "template":
            return (whole, *(m.group(offset + 1 + j) for j in range(self.group_count)))
        values: list[str | None] = [None] * len(self.keys)
        for j, key in enumerate(self.group_keys):
            if values[key] is None:
                values[key] = m.group(offset + 1 + j)
        return (whole, *values)


# ═══════════════════════════════════════════════════════════════════════════════
# Compilation
# ═══════════════════════════════════════════════════════════════════════════════


def sort_key(template: str) -> str:
    """Collapse ``{name}``, ``{+name}``, ``{/name}`` to ``{}``, ``{+}``, ``{/}``.

    Templates differing only in variable names share a sort key and are
    treated as the same route by the table.
    """
    return _SORT_TOKEN.sub(r"{\1}", template)


def compile_template(pattern: str | PatternLike | None, value: Any = None) -> CompiledPattern:
    """Compile a bare pattern; shorthand for ``compile_route(Route(pattern, value))``."""
    return compile_route(Route(pattern=pattern, value=value))


def compile_route(route: Route) -> CompiledPattern:
    """Compile a route's pattern.

    Raises:
        InvalidPatternError: pattern is None, of an unusable type, or an
            invalid raw regex
        PatternTooLongError: pattern exceeds the length limits
    """
    pattern = route.pattern
    if pattern is None:
        raise InvalidPatternError(pattern, "route pattern is undefined")

    if isinstance(pattern, str):
        raw = _RAW_REGEX.fullmatch(pattern)
        if raw is not None:
            return _compile_raw(route, pattern, raw.group(1), raw.group(2))
        return _compile_uri_template(route, pattern)

    if callable(getattr(pattern, "search", None)):
        # Leading space sorts pattern objects with raw regexes, ahead of "/".
        label = str(getattr(pattern, "pattern", pattern))
        return CompiledPattern(
            pattern=pattern,
            keys=(),
            sort_key=" " + label,
            route=route,
            kind="object",
        )

    msg = f"expected a template string or an object with search(), got {type(pattern).__name__}"
    raise InvalidPatternError(pattern, msg)


def _compile_raw(route: Route, template: str, body: str, flags: str) -> CompiledPattern:
    if len(body) > MAX_REGEX_PATTERN_LENGTH:
        raise PatternTooLongError(template, len(body), MAX_REGEX_PATTERN_LENGTH)

    unknown = set(flags) - _INLINE_FLAGS - _IGNORED_FLAGS - {_STICKY_FLAG}
    if unknown:
        msg = f"unsupported regex flag(s): {''.join(sorted(unknown))}"
        raise InvalidPatternError(template, msg)
    inline = "".join(sorted(set(flags) & _INLINE_FLAGS))
    source = f"(?{inline}:{body})" if inline else f"(?:{body})"
    if _STICKY_FLAG in flags:
        source = r"\A" + source

    try:
        # The body is checked alone first so unbalanced groups cannot
        # escape the non-capturing wrapper.
        re2.compile(body)
        compiled = re2.compile(source)
    except re2.error as e:
        raise InvalidPatternError(template, f"invalid regex: {e}") from e

    return CompiledPattern(
        pattern=compiled,
        keys=(),
        # Space (0x20) sorts before "/" (0x2F): raw regexes dispatch first.
        sort_key=" " + template,
        route=route,
        kind="regex",
        source=source,
    )


def _compile_uri_template(route: Route, template: str) -> CompiledPattern:
    if len(template) > MAX_TEMPLATE_LENGTH:
        raise PatternTooLongError(template, len(template), MAX_TEMPLATE_LENGTH)

    items, keys = _tokenize(template)
    piece = _Assembler(items).build(0, boundary=False)
    if piece is None:
        logger.warning(
            "template %r can never match: a variable is not followed by '/' or the end",
            template,
        )
        piece = _Piece(_NEVER, ())

    try:
        compiled = re2.compile(f"^{piece.source}$")
    except re2.error as e:  # pragma: no cover - generated sources are always valid
        raise InvalidPatternError(template, f"invalid generated regex: {e}") from e

    return CompiledPattern(
        pattern=compiled,
        keys=tuple(keys),
        sort_key=sort_key(template),
        route=route,
        kind="template",
        source=piece.source,
        group_keys=piece.group_keys,
    )


# ── Template assembly ──────────────────────────────────────────────────────

# A token is (modifier, key index); a literal is its raw text.
_Item: TypeAlias = str | tuple[str, int]


def _tokenize(template: str) -> tuple[list[_Item], list[str]]:
    items: list[_Item] = []
    keys: list[str] = []
    pos = 0
    for m in _TOKEN.finditer(template):
        if m.start() > pos:
            items.append(template[pos : m.start()])
        items.append((m.group(1), len(keys)))
        keys.append(m.group(2))
        pos = m.end()
    if pos < len(template):
        items.append(template[pos:])
    return items, keys


@dataclass(frozen=True, slots=True)
class _Piece:
    """Regex source for a template suffix, plus the key owned by each group."""

    source: str
    group_keys: tuple[int, ...]


class _Assembler:
    """Builds the regex for a token list, honoring segment boundaries.

    ``build(i, boundary)`` returns the regex for ``items[i:]``. When
    ``boundary`` is set, the text matched from ``i`` on must be empty or
    start with ``/``; None means no text can satisfy that.
    """

    __slots__ = ("_items", "_memo")

    def __init__(self, items: list[_Item]) -> None:
        self._items = items
        self._memo: dict[tuple[int, bool], _Piece | None] = {}

    def build(self, i: int, boundary: bool) -> _Piece | None:
        memo_key = (i, boundary)
        if memo_key not in self._memo:
            self._memo[memo_key] = self._build(i, boundary)
        return self._memo[memo_key]

    def _build(self, i: int, boundary: bool) -> _Piece | None:
        if i == len(self._items):
            return _Piece("", ())
        item = self._items[i]

        if isinstance(item, str):
            if boundary and not item.startswith("/"):
                return None
            rest = self.build(i + 1, boundary=False)
            if rest is None:
                return None
            return _Piece(re2.escape(item) + rest.source, rest.group_keys)

        modifier, key = item
        match modifier:
            case "+":
                rest = self.build(i + 1, boundary=False)
                if rest is None:
                    return None
                group = f"(/{_RESERVED_CHAR}*)" if boundary else f"({_RESERVED_CHAR}+)"
                return _Piece(group + rest.source, (key, *rest.group_keys))
            case "/":
                return self._optional(i, key, boundary)
            case _:
                if boundary:
                    return None
                rest = self.build(i + 1, boundary=True)
                if rest is None:
                    return None
                return _Piece("([^/]+)" + rest.source, (key, *rest.group_keys))

    def _optional(self, i: int, key: int, boundary: bool) -> _Piece | None:
        present = self.build(i + 1, boundary=True)
        absent = self.build(i + 1, boundary=boundary)
        if present is None:
            # The segment can never be present; its key stays unmatched.
            return absent
        if absent is None:
            return _Piece("/([^/]+)" + present.source, (key, *present.group_keys))
        if present == absent:
            return _Piece("(?:/([^/]+))?" + present.source, (key, *present.group_keys))
        return _Piece(
            f"(?:/([^/]+){present.source}|{absent.source})",
            (key, *present.group_keys, *absent.group_keys),
        )
