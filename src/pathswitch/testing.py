"""Test utilities for pathswitch.

Provides an in-memory loader for handler discovery. It exists to exercise
directory traversal without writing importable modules to disk; real
deployments use the default ``load_handler`` or their own loader.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pathswitch._discovery import NotAHandlerError


@dataclass(frozen=True, slots=True)
class MappingLoader:
    """Serve handlers from a mapping keyed by path relative to ``root``.

    Keys use ``/`` separators (``"v1/hello.py"``). Unknown entries raise
    NotAHandlerError, so unlisted directories are descended into. A value
    that is an exception instance is raised, simulating a broken module.

    >>> loader = MappingLoader(Path("handlers"), {"hello.py": {"paths": {}}})
    >>> loader(Path("handlers/hello.py"))
    {'paths': {}}
    """

    root: Path
    handlers: dict[str, Any] = field(default_factory=dict)

    def __call__(self, path: Path, /) -> Any:
        key = Path(path).relative_to(self.root).as_posix()
        if key not in self.handlers:
            raise NotAHandlerError(path)
        value = self.handlers[key]
        if isinstance(value, BaseException):
            raise value
        return value
