"""Handler descriptors — Swagger-2.0-shaped ``paths`` maps → routes.

A descriptor is anything exposing ``paths``: a mapping with a ``paths`` key,
or an object (typically a module) with a ``paths`` attribute. ``paths`` maps
a template to the value routed there, usually a mapping of HTTP method to
handler::

    {"paths": {"/v1/hello": {"get": {"request_handler": hello}}}}

Loaded handlers may also be factories: a callable, or a module defining
``create(config)``, invoked with a configuration object to produce the
descriptor.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import ModuleType
from typing import TYPE_CHECKING, Any

from pathswitch._types import Route, RouterError

if TYPE_CHECKING:
    from collections.abc import Iterable


class DescriptorError(RouterError):
    """A handler descriptor is malformed or its factory failed."""


def descriptor_paths(descriptor: Any) -> Mapping[str, Any]:
    """Return a descriptor's ``paths`` map.

    Raises:
        DescriptorError: no ``paths``, or ``paths`` is not a mapping
    """
    if isinstance(descriptor, Mapping):
        paths = descriptor.get("paths")
    else:
        paths = getattr(descriptor, "paths", None)
    if paths is None:
        msg = f"descriptor {_describe(descriptor)} has no 'paths'"
        raise DescriptorError(msg)
    if not isinstance(paths, Mapping):
        msg = f"descriptor {_describe(descriptor)}: 'paths' must be a mapping, got {type(paths).__name__}"
        raise DescriptorError(msg)
    return paths


def routes_from_paths(paths: Mapping[str, Any]) -> list[Route]:
    """One route per template, the template's value as payload."""
    return [Route(pattern=template, value=methods) for template, methods in paths.items()]


def routes_from_descriptors(descriptors: Iterable[Any]) -> list[Route]:
    """Flatten descriptors into a route list, preserving order."""
    routes: list[Route] = []
    for descriptor in descriptors:
        routes.extend(routes_from_paths(descriptor_paths(descriptor)))
    return routes


def resolve_descriptor(loaded: Any, config: Mapping[str, Any] | None = None) -> Any:
    """Turn a loaded handler into a descriptor.

    - module with ``paths`` → the module
    - module with a callable ``create`` → ``create(config)``
    - any other callable → ``loaded(config)``
    - anything else must already be a descriptor

    Raises:
        DescriptorError: not a descriptor, or the factory raised
    """
    if isinstance(loaded, ModuleType):
        if hasattr(loaded, "paths"):
            descriptor = loaded
        else:
            factory = getattr(loaded, "create", None)
            if not callable(factory):
                msg = f"module {loaded.__name__!r} defines neither 'paths' nor create(config)"
                raise DescriptorError(msg)
            descriptor = _call_factory(factory, config, loaded.__name__)
    elif callable(loaded):
        descriptor = _call_factory(loaded, config, getattr(loaded, "__qualname__", repr(loaded)))
    else:
        descriptor = loaded

    descriptor_paths(descriptor)
    return descriptor


def _call_factory(factory: Any, config: Mapping[str, Any] | None, name: str) -> Any:
    try:
        return factory(config if config is not None else {})
    except Exception as e:
        msg = f"handler factory {name} failed: {e}"
        raise DescriptorError(msg) from e


def _describe(descriptor: Any) -> str:
    if isinstance(descriptor, ModuleType):
        return repr(descriptor.__name__)
    return type(descriptor).__name__
