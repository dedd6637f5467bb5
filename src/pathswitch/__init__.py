"""pathswitch — declarative path router over RFC 6570-style URI templates.

All public types are exported from this module for flat imports:

    from pathswitch import Router, Route, MatchResult, InvalidPatternError
"""

__version__ = "0.1.0"

# Config types — see pathswitch._config for details
from pathswitch._config import (
    ConfigParseError,
    HandlersConfig,
    RouteConfig,
    RouterConfig,
    load_router_config,
    parse_router_config,
)

# Descriptors and discovery
from pathswitch._descriptors import (
    DescriptorError,
    descriptor_paths,
    resolve_descriptor,
    routes_from_descriptors,
    routes_from_paths,
)
from pathswitch._discovery import (
    HandlerLoadError,
    NotAHandlerError,
    discover_descriptors,
    load_handler,
    load_handlers,
)

# Dispatch
from pathswitch._matcher import CombinedMatcher, RawMatch
from pathswitch._resolve import MatchResult, resolve
from pathswitch._router import Router
from pathswitch._table import RouteTable

# Compiler
from pathswitch._template import (
    MAX_REGEX_PATTERN_LENGTH,
    MAX_TEMPLATE_LENGTH,
    CompiledPattern,
    InvalidPatternError,
    PatternTooLongError,
    compile_route,
    compile_template,
    sort_key,
)
from pathswitch._types import PatternLike, Route, RouterError

__all__ = [
    # Core types
    "Route",
    "PatternLike",
    "RouterError",
    # Router
    "Router",
    "RouteTable",
    "MatchResult",
    # Compiler
    "CompiledPattern",
    "compile_route",
    "compile_template",
    "sort_key",
    "InvalidPatternError",
    "PatternTooLongError",
    "MAX_TEMPLATE_LENGTH",
    "MAX_REGEX_PATTERN_LENGTH",
    # Dispatch
    "CombinedMatcher",
    "RawMatch",
    "resolve",
    # Descriptors
    "DescriptorError",
    "descriptor_paths",
    "resolve_descriptor",
    "routes_from_descriptors",
    "routes_from_paths",
    # Discovery
    "NotAHandlerError",
    "HandlerLoadError",
    "load_handler",
    "load_handlers",
    "discover_descriptors",
    # Config
    "RouteConfig",
    "HandlersConfig",
    "RouterConfig",
    "ConfigParseError",
    "parse_router_config",
    "load_router_config",
]
