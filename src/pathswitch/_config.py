"""Router configuration — dict / YAML file → RouterConfig.

Config-driven router construction path:
  YAML → load_router_config() → RouterConfig → Router.from_config() → Router

Shape::

    routes:                     # optional, static routes, registered first
      - pattern: /{foo}/{bar}/html
        value: html             # or ``methods``
    handlers:                   # optional, discovered routes, registered after
      paths: [handlers/]        # str or list; relative to the config file
      strict: false
      config: {greeting: hi}    # passed to factory handlers

JSON is a subset of YAML, so ``.json`` config files load the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from pathswitch._types import RouterError

if TYPE_CHECKING:
    import os

# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """A static route: template (or ``re:/…/`` literal) and its value."""

    pattern: str
    value: Any = None


@dataclass(frozen=True, slots=True)
class HandlersConfig:
    """Directories to discover handler descriptors from."""

    paths: tuple[str, ...]
    strict: bool = False
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Configuration for a Router."""

    routes: tuple[RouteConfig, ...] = ()
    handlers: HandlersConfig | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════════

_TOP_LEVEL_FIELDS = frozenset({"routes", "handlers"})


class ConfigParseError(RouterError):
    """Error parsing a config dict into config types."""


def load_router_config(path: str | os.PathLike[str]) -> RouterConfig:
    """Read and parse a YAML (or JSON) router config file.

    An empty file is an empty config.

    Raises:
        ConfigParseError: unreadable file, invalid YAML, or malformed config
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        msg = f"cannot read config {path}: {e}"
        raise ConfigParseError(msg) from e
    except yaml.YAMLError as e:
        msg = f"invalid YAML in {path}: {e}"
        raise ConfigParseError(msg) from e
    return parse_router_config({} if data is None else data)


def parse_router_config(data: dict[str, Any]) -> RouterConfig:
    """Parse a dict into a RouterConfig.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    unknown = set(data) - _TOP_LEVEL_FIELDS
    if unknown:
        msg = f"unknown config field(s): {', '.join(sorted(map(str, unknown)))}"
        raise ConfigParseError(msg)

    raw_routes = data.get("routes", [])
    if raw_routes is None:
        raw_routes = []
    if not isinstance(raw_routes, list):
        msg = f"'routes' must be a list, got {type(raw_routes).__name__}"
        raise ConfigParseError(msg)
    routes = tuple(_parse_route(r, i) for i, r in enumerate(raw_routes))

    handlers = None
    if data.get("handlers") is not None:
        handlers = _parse_handlers(data["handlers"])

    return RouterConfig(routes=routes, handlers=handlers)


def _parse_route(data: Any, index: int) -> RouteConfig:
    if not isinstance(data, dict):
        msg = f"routes[{index}]: expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    if "pattern" not in data:
        msg = f"routes[{index}]: missing required field 'pattern'"
        raise ConfigParseError(msg)
    pattern = data["pattern"]
    if not isinstance(pattern, str):
        msg = f"routes[{index}]: 'pattern' must be a string, got {type(pattern).__name__}"
        raise ConfigParseError(msg)

    value = data["value"] if "value" in data else data.get("methods")
    return RouteConfig(pattern=pattern, value=value)


def _parse_handlers(data: Any) -> HandlersConfig:
    if isinstance(data, (str, list)):
        data = {"paths": data}
    if not isinstance(data, dict):
        msg = f"'handlers' must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_paths = data.get("paths")
    if raw_paths is None:
        msg = "handlers: missing required field 'paths'"
        raise ConfigParseError(msg)
    if isinstance(raw_paths, str):
        raw_paths = [raw_paths]
    if not isinstance(raw_paths, list) or not all(isinstance(p, str) for p in raw_paths):
        msg = "handlers: 'paths' must be a string or a list of strings"
        raise ConfigParseError(msg)

    strict = data.get("strict", False)
    if not isinstance(strict, bool):
        msg = f"handlers: 'strict' must be a bool, got {type(strict).__name__}"
        raise ConfigParseError(msg)

    config = data.get("config", {})
    if not isinstance(config, dict):
        msg = f"handlers: 'config' must be a dict, got {type(config).__name__}"
        raise ConfigParseError(msg)

    return HandlersConfig(paths=tuple(raw_paths), strict=strict, config=config)
