"""Router — the public facade over a RouteTable.

The router owns a single reference to an immutable RouteTable. Mutations
build a new table and swap the reference (copy-and-swap): concurrent
readers see either the old or the new table, never a partial one.
Concurrent writers must be serialized by the caller.

Example::

    router = Router([
        Route("/{foo}/{bar}/html", "html"),
        Route("/{foo}/baz/{+path}", "rest"),
    ])
    m = router.match("/some/baz/a/b")
    m.value             # "rest"
    m.params["path"]    # "a/b"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pathswitch._config import RouterConfig, load_router_config, parse_router_config
from pathswitch._descriptors import routes_from_descriptors, routes_from_paths
from pathswitch._discovery import discover_descriptors
from pathswitch._table import RouteTable
from pathswitch._types import Route

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from pathswitch._discovery import Loader
    from pathswitch._resolve import MatchResult
    from pathswitch._template import CompiledPattern


class Router:
    """Match paths against URI templates, raw regexes and pattern objects."""

    __slots__ = ("_table",)

    def __init__(self, routes: Iterable[Route | Mapping[str, Any]] = ()) -> None:
        self._table = RouteTable.build(routes)

    # ── Construction ───────────────────────────────────────────────────────

    @classmethod
    def from_route_descriptors(cls, descriptors: Iterable[Any]) -> Router:
        """Create a router from descriptors exposing Swagger 2.0 ``paths`` maps."""
        return cls(routes_from_descriptors(descriptors))

    @classmethod
    def from_directories(
        cls,
        paths: str | os.PathLike[str] | Iterable[str | os.PathLike[str]],
        *,
        loader: Loader | None = None,
        config: Mapping[str, Any] | None = None,
        strict: bool = False,
    ) -> Router:
        """Create a router from handler modules discovered under ``paths``.

        Factory handlers are called with ``config``. See
        ``pathswitch._discovery`` for traversal and failure semantics.
        """
        descriptors = discover_descriptors(paths, loader=loader, config=config, strict=strict)
        return cls.from_route_descriptors(descriptors)

    @classmethod
    def from_config(
        cls,
        config: RouterConfig | Mapping[str, Any] | str | os.PathLike[str],
        *,
        base_dir: str | os.PathLike[str] | None = None,
        loader: Loader | None = None,
    ) -> Router:
        """Create a router from a RouterConfig, a config dict, or a config file.

        Static routes are registered before discovered ones. Relative
        handler paths resolve against ``base_dir``, which defaults to the
        config file's directory (or the working directory for in-memory
        configs).
        """
        if isinstance(config, (str, os.PathLike)):
            path = Path(config)
            if base_dir is None:
                base_dir = path.parent
            config = load_router_config(path)
        elif not isinstance(config, RouterConfig):
            config = parse_router_config(dict(config))
        base = Path(base_dir) if base_dir is not None else Path.cwd()

        routes = [Route(pattern=r.pattern, value=r.value) for r in config.routes]
        if config.handlers is not None:
            descriptors = discover_descriptors(
                [base / p for p in config.handlers.paths],
                loader=loader,
                config=config.handlers.config,
                strict=config.handlers.strict,
            )
            routes.extend(routes_from_descriptors(descriptors))
        return cls(routes)

    # ── Matching ───────────────────────────────────────────────────────────

    @property
    def table(self) -> RouteTable:
        """The current (immutable) route table."""
        return self._table

    @property
    def routes(self) -> tuple[Route, ...]:
        """Every registered route, in registration order."""
        return self._table.routes

    def match(self, path: str) -> MatchResult | None:
        """Return the first route matching ``path``, or None.

        Raises:
            TypeError: ``path`` is not a string
        """
        if not isinstance(path, str):
            msg = f"path must be a string, got {type(path).__name__}"
            raise TypeError(msg)
        return self._table.match(path)

    # ── Mutation ───────────────────────────────────────────────────────────

    def add_route(self, route: Route | Mapping[str, Any]) -> None:
        """Register a route. On error the router is left unchanged."""
        self._table = self._table.add(route)

    def add_handler(self, handler: Mapping[str, Any]) -> None:
        """Register a ``{template: methods}`` map in one rebuild."""
        self._table = self._table.extend(routes_from_paths(handler))

    def remove_route(self, route: Route | str | Callable[[Route], bool]) -> None:
        """Unregister routes.

        ``route`` is a Route (removed by identity), a template string
        (every route registered with an equal pattern), or a predicate
        over registered routes.
        """
        if isinstance(route, Route):
            target = route
            predicate: Callable[[Route], bool] = lambda r: r is target  # noqa: E731
        elif isinstance(route, str):
            template = route
            predicate = lambda r: r.pattern == template  # noqa: E731
        elif callable(route):
            predicate = route
        else:
            msg = f"expected a Route, template string or predicate, got {type(route).__name__}"
            raise TypeError(msg)
        self._table = self._table.remove(predicate)

    # ── Introspection ──────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[CompiledPattern]:
        return iter(self._table)

    def __str__(self) -> str:
        return "\n".join(f"{entry.sort_key}  {entry.template}" for entry in self._table)

    def __repr__(self) -> str:
        return f"<Router routes={len(self)}>"
