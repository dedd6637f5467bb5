"""Conformance fixture loader for pathswitch.

Loads YAML fixtures from tests/fixtures/ and builds a Router per document
for parametrized testing. Each document declares ``routes`` and ``cases``;
a case's ``expect`` is the matched value, or null for no match.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from pathswitch import Route, Router

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class FixtureCase:
    """A single test case from a conformance fixture."""

    fixture_name: str
    case_name: str
    router: Router
    path: str
    expect: Any
    sort_key: str | None
    params: dict[str, str | None] | None

    @property
    def id(self) -> str:
        return f"{self.fixture_name}/{self.case_name}"


# ─── YAML → pathswitch type conversion ──────────────────────────────────────


def parse_routes(spec: list[dict[str, Any]]) -> list[Route]:
    """Parse a fixture's route list."""
    return [Route(pattern=r["pattern"], value=r.get("value")) for r in spec]


def parse_params(spec: dict[Any, Any] | None) -> dict[str, str | None] | None:
    """Normalize YAML params: keys and non-null values become strings."""
    if spec is None:
        return None
    return {str(k): None if v is None else str(v) for k, v in spec.items()}


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_fixtures() -> list[FixtureCase]:
    """Load all conformance fixtures, in file order."""
    cases: list[FixtureCase] = []
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        cases.extend(_load_file(yaml_file))
    return cases


def _load_file(path: Path) -> list[FixtureCase]:
    """Load a single fixture YAML file (may contain multiple documents)."""
    cases: list[FixtureCase] = []
    with path.open() as f:
        for doc in yaml.safe_load_all(f):
            if doc is None:
                continue
            fixture_name = doc["name"]
            router = Router(parse_routes(doc["routes"]))
            for case in doc["cases"]:
                cases.append(
                    FixtureCase(
                        fixture_name=fixture_name,
                        case_name=case["name"],
                        router=router,
                        path=str(case["path"]),
                        expect=case["expect"],
                        sort_key=case.get("sort_key"),
                        params=parse_params(case.get("params")),
                    )
                )
    return cases
