"""Tests for waypost.cli — CLI entrypoint and argument parsing."""

import argparse
import json
import sys
import types
from pathlib import Path

import pytest

from waypost.cli import main
from waypost.cli._serve import build_gateway, run_serve

ROUTES = """\
# orders
GET     /orders/{id}        orders.api:get          Fetch one order
POST    /orders             orders.api:create
GET     /docs/{page}        /orders/pub/{page}.html
"""


@pytest.fixture
def route_file(tmp_path: Path) -> Path:
    path = tmp_path / "http-routes.cnf"
    path.write_text(ROUTES)
    return path


class TestCLIHelp:
    @pytest.mark.parametrize("command", [[], ["parse"], ["normalize"], ["routes"], ["match"], ["serve"]])
    def test_help_exits_zero(self, command: list[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([*command, "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    def test_parse_missing_uri(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["parse"])
        assert exc_info.value.code == 2

    def test_routes_missing_files(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes"])
        assert exc_info.value.code == 2

    def test_match_missing_uri(self, route_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", str(route_file)])
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "waypost" in captured.out


class TestParseCommand:
    def test_prints_document(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["parse", "http://Example.com:8080/a/b.html?q=1#top"])
        output = json.loads(capsys.readouterr().out)
        assert output == {
            "scheme": "http",
            "authority": {"host": "Example.com", "port": 8080},
            "path": ["a"],
            "path_absolute": True,
            "file": "b.html",
            "query": {"q": "1"},
            "fragment": "top",
            "opaque": False,
            "absolute": True,
        }

    def test_opaque(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["parse", "mailto:a@b.com"])
        output = json.loads(capsys.readouterr().out)
        assert output["body"] == "a@b.com"
        assert output["opaque"] is True

    def test_invalid_uri(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["parse", "http://a b"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestNormalizeCommand:
    def test_prints_each(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["normalize", "HTTP://Example.COM:80/a/b?x=1+2", "/a/./b"])
        assert capsys.readouterr().out.splitlines() == ["http://example.com/a/b?x=1%202", "/a/./b"]

    def test_failure_continues(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["normalize", "/bad%zz", "/ok"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out.splitlines() == ["/ok"]
        assert "Malformed escape pair" in captured.err


class TestRoutesCommand:
    def test_lists_routes(self, route_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", str(route_file)])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["METHOD", "PATH", "TARGET"]
        assert "orders.api:get (Fetch one order)" in lines[2]
        assert lines[3].split() == ["POST", "/orders", "orders.api:create"]
        assert len(lines) == 5

    def test_empty(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        empty = tmp_path / "empty.cnf"
        empty.write_text("# nothing here\n")
        main(["routes", str(empty)])
        assert capsys.readouterr().out.strip() == "No routes defined."

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", str(tmp_path / "nope.cnf")])
        assert exc_info.value.code == 1
        assert "route file not found" in capsys.readouterr().err


class TestMatchCommand:
    def test_invoke(self, route_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", str(route_file), "--uri", "/orders/42?expand=lines"])
        output = json.loads(capsys.readouterr().out)
        assert output["route"]["target"] == "orders.api:get"
        assert output["route"]["method"] == "get"
        assert output["invoke"] is True
        assert output["captures"] == {"id": "42"}
        assert output["params"] == {"expand": "lines", "id": "42"}
        assert "forward_path" not in output

    def test_forward(self, route_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", str(route_file), "-X", "get", "--uri", "/docs/intro"])
        output = json.loads(capsys.readouterr().out)
        assert output["invoke"] is False
        assert output["forward_path"] == "/orders/pub/intro.html"

    def test_no_match(self, route_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", str(route_file), "-X", "DELETE", "--uri", "/orders/1"])
        assert exc_info.value.code == 1
        assert "403" in capsys.readouterr().err


def _serve_args(**overrides: object) -> argparse.Namespace:
    values: dict[str, object] = {
        "files": [],
        "config_dir": None,
        "package_dir": [],
        "services": None,
        "forward": None,
        "host": None,
        "port": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestServeCommand:
    def test_build_gateway_from_config_dir(self, route_file: Path) -> None:
        gateway = build_gateway(_serve_args(config_dir=str(route_file.parent), port=9000))
        assert gateway.directives == frozenset({"orders", "docs"})
        assert gateway.config.port == 9000
        assert gateway.config.host == "127.0.0.1"

    def test_build_gateway_extra_files(self, route_file: Path, tmp_path: Path) -> None:
        extra = tmp_path / "extra.cnf"
        extra.write_text("GET /reports/{id} reports.api:get\n")
        gateway = build_gateway(_serve_args(config_dir=str(route_file.parent), files=[str(extra)]))
        assert "reports" in gateway.directives

    def test_build_gateway_services(self, monkeypatch: pytest.MonkeyPatch) -> None:
        module = types.ModuleType("_fake_waypost_services")
        module.services = {"orders.api:get": lambda params: {}}  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, "_fake_waypost_services", module)

        gateway = build_gateway(_serve_args(services="_fake_waypost_services"))
        assert set(gateway.services) == {"orders.api:get"}

    def test_build_gateway_bad_services(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_gateway(_serve_args(services="nonexistent_module_xyz:services"))
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_serve_without_pounce(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setattr("importlib.util.find_spec", lambda name: None)
        with pytest.raises(SystemExit) as exc_info:
            run_serve(_serve_args())
        assert exc_info.value.code == 1
        assert "waypost[server]" in capsys.readouterr().err

    def test_serve_runs_server(self, monkeypatch: pytest.MonkeyPatch, route_file: Path) -> None:
        calls: list[tuple[object, str, int]] = []

        def fake_run_server(app: object, host: str, port: int, **kwargs: object) -> None:
            calls.append((app, host, port))

        monkeypatch.setattr("importlib.util.find_spec", lambda name: object())
        monkeypatch.setattr("waypost.server.dev.run_server", fake_run_server)
        run_serve(_serve_args(config_dir=str(route_file.parent), host="0.0.0.0", port=8123))

        [(app, host, port)] = calls
        assert host == "0.0.0.0"
        assert port == 8123
        assert app.directives == frozenset({"orders", "docs"})  # type: ignore[attr-defined]
