"""Tests for router config parsing (pathswitch._config) and Router.from_config."""

from pathlib import Path

import pytest

from pathswitch import (
    ConfigParseError,
    DescriptorError,
    HandlersConfig,
    InvalidPatternError,
    RouteConfig,
    Router,
    RouterConfig,
    load_router_config,
    parse_router_config,
)


class TestParseRouterConfig:
    """Tests for parse_router_config()."""

    def test_routes(self) -> None:
        config = parse_router_config(
            {
                "routes": [
                    {"pattern": "/{foo}/{bar}/html", "value": "html"},
                    {"pattern": "/{foo}", "methods": {"get": "h"}},
                    {"pattern": "/bare"},
                ]
            }
        )
        assert config.routes == (
            RouteConfig("/{foo}/{bar}/html", "html"),
            RouteConfig("/{foo}", {"get": "h"}),
            RouteConfig("/bare", None),
        )
        assert config.handlers is None

    def test_empty(self) -> None:
        assert parse_router_config({}) == RouterConfig()

    def test_null_routes(self) -> None:
        assert parse_router_config({"routes": None}).routes == ()

    def test_handlers(self) -> None:
        config = parse_router_config(
            {"handlers": {"paths": ["a", "b"], "strict": True, "config": {"k": 1}}}
        )
        assert config.handlers == HandlersConfig(paths=("a", "b"), strict=True, config={"k": 1})

    def test_handlers_path_string(self) -> None:
        config = parse_router_config({"handlers": {"paths": "handlers"}})
        assert config.handlers == HandlersConfig(paths=("handlers",))

    def test_handlers_shorthand(self) -> None:
        assert parse_router_config({"handlers": "h"}).handlers == HandlersConfig(paths=("h",))
        assert parse_router_config({"handlers": ["h", "i"]}).handlers == HandlersConfig(
            paths=("h", "i")
        )

    def test_not_a_dict(self) -> None:
        with pytest.raises(ConfigParseError, match="expected dict"):
            parse_router_config(["routes"])  # type: ignore[arg-type]

    def test_unknown_field(self) -> None:
        with pytest.raises(ConfigParseError, match="unknown config field"):
            parse_router_config({"routes": [], "extra": 1})

    def test_routes_not_a_list(self) -> None:
        with pytest.raises(ConfigParseError, match="must be a list"):
            parse_router_config({"routes": {"pattern": "/a"}})

    def test_route_not_a_dict(self) -> None:
        with pytest.raises(ConfigParseError, match=r"routes\[0\]"):
            parse_router_config({"routes": ["/a"]})

    def test_route_missing_pattern(self) -> None:
        with pytest.raises(ConfigParseError, match="missing required field 'pattern'"):
            parse_router_config({"routes": [{"value": 1}]})

    def test_route_pattern_not_string(self) -> None:
        with pytest.raises(ConfigParseError, match=r"routes\[1\]: 'pattern' must be a string"):
            parse_router_config({"routes": [{"pattern": "/a"}, {"pattern": 5}]})

    def test_handlers_missing_paths(self) -> None:
        with pytest.raises(ConfigParseError, match="'paths'"):
            parse_router_config({"handlers": {"strict": True}})

    def test_handlers_bad_paths(self) -> None:
        with pytest.raises(ConfigParseError):
            parse_router_config({"handlers": {"paths": ["a", 1]}})

    def test_handlers_bad_strict(self) -> None:
        with pytest.raises(ConfigParseError, match="'strict' must be a bool"):
            parse_router_config({"handlers": {"paths": "a", "strict": "yes"}})

    def test_handlers_bad_config(self) -> None:
        with pytest.raises(ConfigParseError, match="'config' must be a dict"):
            parse_router_config({"handlers": {"paths": "a", "config": []}})

    def test_handlers_not_a_dict(self) -> None:
        with pytest.raises(ConfigParseError):
            parse_router_config({"handlers": 3})


class TestLoadRouterConfig:
    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "router.yaml"
        path.write_text("routes:\n  - pattern: /{a}\n    value: a\n")
        assert load_router_config(path).routes == (RouteConfig("/{a}", "a"),)

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "router.json"
        path.write_text('{"routes": [{"pattern": "/{a}", "value": 1}]}')
        assert load_router_config(str(path)).routes == (RouteConfig("/{a}", 1),)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_router_config(path) == RouterConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigParseError, match="cannot read config"):
            load_router_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("routes: [unclosed\n")
        with pytest.raises(ConfigParseError, match="invalid YAML"):
            load_router_config(path)


class TestRouterFromConfig:
    def test_from_mapping(self) -> None:
        router = Router.from_config({"routes": [{"pattern": "/{a}", "value": "a"}]})
        assert router.match("/x").value == "a"

    def test_from_router_config(self) -> None:
        router = Router.from_config(RouterConfig(routes=(RouteConfig("/x", 1),)))
        assert router.match("/x").value == 1

    def test_invalid_pattern(self) -> None:
        with pytest.raises(InvalidPatternError):
            Router.from_config({"routes": [{"pattern": "re:/(/"}]})

    def test_handlers_relative_to_config_file(self, tmp_path: Path) -> None:
        (tmp_path / "handlers").mkdir()
        (tmp_path / "handlers" / "hello.py").write_text(
            "def create(config):\n"
            "    return {'paths': {'/hello': config['greeting']}}\n"
        )
        path = tmp_path / "router.yaml"
        path.write_text(
            "routes:\n"
            "  - pattern: /hello\n"
            "    value: static\n"
            "  - pattern: /{name}\n"
            "    value: fallback\n"
            "handlers:\n"
            "  paths: handlers\n"
            "  config: {greeting: hi}\n"
        )
        router = Router.from_config(path)
        # discovered routes register after static ones, so they shadow them
        assert router.match("/hello").value == "hi"
        assert router.match("/bob").value == "fallback"

    def test_base_dir(self, tmp_path: Path) -> None:
        (tmp_path / "h").mkdir()
        (tmp_path / "h" / "a.yaml").write_text("paths: {/a: 1}\n")
        router = Router.from_config({"handlers": "h"}, base_dir=tmp_path)
        assert router.match("/a").value == 1

    def test_strict_handlers(self, tmp_path: Path) -> None:
        (tmp_path / "h").mkdir()
        (tmp_path / "h" / "a.yaml").write_text("nothing: here\n")
        Router.from_config({"handlers": "h"}, base_dir=tmp_path)
        with pytest.raises(DescriptorError, match="no 'paths'"):
            Router.from_config({"handlers": {"paths": "h", "strict": True}}, base_dir=tmp_path)
