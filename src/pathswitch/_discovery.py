"""Handler discovery — directory trees → loaded handlers → descriptors.

Discovery walks directories and hands every entry to a loader, a plain
callable ``(path) → value``. The loader is injected so callers control how
identifiers become values (importing, parsing, or serving from memory, see
``pathswitch.testing.MappingLoader``).

Per directory, in sorted name order, skipping names starting with ``.`` or
``_``:

- loader returns a value → collected
- loader raises on a directory, for any reason → recurse (after this level)
- loader raises NotAHandlerError on a file → skipped
- loader raises anything else on a file → logged and skipped; raised as
  HandlerLoadError when ``strict``

One broken module never hides its siblings unless ``strict`` is set.
"""

from __future__ import annotations

import importlib.util
import json
import logging
import os
import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeAlias

import yaml

from pathswitch._descriptors import DescriptorError, resolve_descriptor
from pathswitch._types import RouterError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from types import ModuleType

    Loader: TypeAlias = Callable[[Path], Any]

logger = logging.getLogger(__name__)

_MODULE_PREFIX = "_pathswitch_handler_"
_UNSAFE_NAME = re.compile(r"\W")


# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class NotAHandlerError(RouterError):
    """The loader does not treat this entry as a handler.

    Directories answering this are descended into; files are skipped.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"not a handler: {self.path}")


class HandlerLoadError(RouterError):
    """A handler could not be loaded (raised in strict mode)."""

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"failed to load handler {self.path}: {cause}")


# ═══════════════════════════════════════════════════════════════════════════════
# Default loader
# ═══════════════════════════════════════════════════════════════════════════════


def load_handler(path: Path) -> Any:
    """Load one directory entry.

    - ``*.py`` → imported module
    - directory with ``__init__.py`` → imported package
    - ``*.json`` → parsed with ``json``
    - ``*.yaml`` / ``*.yml`` → parsed with ``yaml.safe_load``

    Raises:
        NotAHandlerError: anything else
    """
    path = Path(path)
    if path.is_dir():
        init = path / "__init__.py"
        if not init.is_file():
            raise NotAHandlerError(path)
        return _import_path(path, init, package=True)

    match path.suffix:
        case ".py":
            return _import_path(path, path, package=False)
        case ".json":
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        case ".yaml" | ".yml":
            with path.open(encoding="utf-8") as f:
                return yaml.safe_load(f)
        case _:
            raise NotAHandlerError(path)


def _import_path(path: Path, location: Path, *, package: bool) -> ModuleType:
    name = f"{_MODULE_PREFIX}{_UNSAFE_NAME.sub('_', str(path.resolve()))}"
    spec = importlib.util.spec_from_file_location(
        name,
        location,
        submodule_search_locations=[str(path)] if package else None,
    )
    if spec is None or spec.loader is None:
        raise NotAHandlerError(path)

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


# ═══════════════════════════════════════════════════════════════════════════════
# Traversal
# ═══════════════════════════════════════════════════════════════════════════════


def load_handlers(
    directory: str | os.PathLike[str],
    *,
    loader: Loader = load_handler,
    strict: bool = False,
) -> list[Any]:
    """Load every handler under ``directory``, recursing into non-handler directories.

    Handlers of a directory come before those of its subdirectories.

    Raises:
        HandlerLoadError: ``strict`` and an entry failed to load
        OSError: ``directory`` itself cannot be listed
    """
    handlers: list[Any] = []
    subdirs: list[Path] = []
    for entry in sorted(Path(directory).iterdir()):
        if entry.name.startswith((".", "_")):
            continue
        try:
            handlers.append(loader(entry))
        except Exception as e:
            if entry.is_dir():
                # A directory the loader refuses, for any reason, is descended into.
                if not isinstance(e, NotAHandlerError):
                    logger.debug("loader failed on directory %s (%s)", entry, e)
                subdirs.append(entry)
                continue
            if isinstance(e, NotAHandlerError):
                logger.debug("skipping %s: not a handler", entry)
                continue
            if strict:
                raise HandlerLoadError(entry, e) from e
            logger.warning("skipping handler %s: %s", entry, e)

    for subdir in subdirs:
        logger.debug("descending into %s", subdir)
        try:
            handlers.extend(load_handlers(subdir, loader=loader, strict=strict))
        except OSError as e:
            if strict:
                raise HandlerLoadError(subdir, e) from e
            logger.warning("skipping unreadable directory %s: %s", subdir, e)
    return handlers


def discover_descriptors(
    paths: str | os.PathLike[str] | Iterable[str | os.PathLike[str]],
    *,
    loader: Loader | None = None,
    config: Mapping[str, Any] | None = None,
    strict: bool = False,
) -> list[Any]:
    """Load handlers from one or more directories and resolve them to descriptors.

    Factory handlers are called with ``config``.

    Raises:
        HandlerLoadError: a root is not a readable directory, or ``strict``
            and an entry failed to load
        DescriptorError: ``strict`` and a handler is not a usable descriptor
    """
    if isinstance(paths, (str, os.PathLike)):
        paths = [paths]
    loader = loader if loader is not None else load_handler

    roots = [Path(p) for p in paths]
    handlers: list[Any] = []
    for root in roots:
        if not root.is_dir():
            raise HandlerLoadError(root, NotADirectoryError(f"not a directory: {root}"))
        try:
            handlers.extend(load_handlers(root, loader=loader, strict=strict))
        except OSError as e:
            raise HandlerLoadError(root, e) from e

    descriptors: list[Any] = []
    for handler in handlers:
        try:
            descriptors.append(resolve_descriptor(handler, config))
        except DescriptorError as e:
            if strict:
                raise
            logger.warning("skipping handler: %s", e)
    logger.debug("discovered %d descriptors under %d roots", len(descriptors), len(roots))
    return descriptors
