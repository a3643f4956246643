"""Tests for CLI flags, session bootstrap, --list-extensions and the command loop."""

import argparse
import json
import logging
import logging.handlers
from pathlib import Path
from typing import Iterator

import pytest

from agent_cli.cli import parse_args
from agent_cli.commands import build_dispatcher
from agent_cli.extensions import ExtensionSession
from agent_cli.runner import build_session, format_extension_list, main, run_interactive
from agent_cli.settings import get_default_settings, reload_settings


def _write_extension(root: Path, name: str, **fields: object) -> Path:
    ext_dir = root / ".gemini" / "extensions" / name
    ext_dir.mkdir(parents=True)
    manifest = {"name": name, "version": "1.0.0", **fields}
    (ext_dir / "gemini-extension.json").write_text(json.dumps(manifest), encoding="utf-8")
    return ext_dir


def _args(**overrides: object) -> argparse.Namespace:
    args = parse_args([])
    for key, value in overrides.items():
        setattr(args, key, value)
    return args


@pytest.fixture(autouse=True)
def _isolate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reload_settings()
    root = logging.getLogger()
    level = root.level
    yield
    reload_settings()
    for h in root.handlers[:]:
        if isinstance(h, logging.handlers.RotatingFileHandler) or type(h) is logging.StreamHandler:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.extensions is None
        assert args.enable_extension is None
        assert args.list_extensions is False

    def test_extensions_repeated_and_comma_separated(self) -> None:
        args = parse_args(["-e", "a,b", "--extensions", "c", "d"])
        assert args.extensions == ["a", "b", "c", "d"]

    def test_enable_extension(self) -> None:
        args = parse_args(["--enable-extension", "disabled-ext"])
        assert args.enable_extension == ["disabled-ext"]

    def test_list_extensions_short_flag(self) -> None:
        assert parse_args(["-l"]).list_extensions is True


class TestBuildSession:
    def test_disabled_by_default(self, tmp_path: Path) -> None:
        _write_extension(tmp_path, "disabled-ext", enabled=False)
        session = build_session(tmp_path, get_default_settings(), _args(), tmp_path / "home")
        assert [e.name for e in session.all_extensions] == ["disabled-ext"]
        assert session.active_extensions() == []

    def test_enable_extension_flag(self, tmp_path: Path) -> None:
        _write_extension(tmp_path, "disabled-ext", enabled=False)
        session = build_session(
            tmp_path,
            get_default_settings(),
            _args(enable_extension=["disabled-ext"]),
            tmp_path / "home",
        )
        assert [e.name for e in session.active_extensions()] == ["disabled-ext"]

    def test_flag_allow_list_overrides_settings(self, tmp_path: Path) -> None:
        _write_extension(tmp_path, "a")
        _write_extension(tmp_path, "b")
        settings = get_default_settings()
        settings["extensions"]["enabled"] = ["a"]
        session = build_session(tmp_path, settings, _args(), tmp_path / "home")
        assert [e.name for e in session.active_extensions()] == ["a"]
        session = build_session(tmp_path, settings, _args(extensions=["b"]), tmp_path / "home")
        assert [e.name for e in session.active_extensions()] == ["b"]

    @pytest.mark.parametrize(
        ("key", "value", "expected"),
        [
            ("enabled", "ab", ["ab"]),
            ("enabled", "ab, other", ["ab"]),
            ("additional_enabled", "ab", ["a", "ab"]),
        ],
    )
    def test_scalar_setting_is_one_name(
        self, tmp_path: Path, key: str, value: str, expected: list[str]
    ) -> None:
        _write_extension(tmp_path, "ab", enabled=False)
        _write_extension(tmp_path, "a")
        settings = get_default_settings()
        settings["extensions"][key] = value
        session = build_session(tmp_path, settings, _args(), tmp_path / "home")
        assert [e.name for e in session.active_extensions()] == expected

    def test_none_from_flags(self, tmp_path: Path) -> None:
        _write_extension(tmp_path, "a")
        session = build_session(
            tmp_path, get_default_settings(), _args(extensions=["none"]), tmp_path / "home"
        )
        assert session.active_extensions() == []

    def test_startup_activation_logged(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_extension(tmp_path, "a")
        with caplog.at_level(logging.INFO):
            build_session(tmp_path, get_default_settings(), _args(), tmp_path / "home")
        assert "Loading extension: a (version: 1.0.0, enabled: yes)" in caplog.text
        assert "Activated extension: a (version: 1.0.0)" in caplog.text


class TestFormatExtensionList:
    def test_empty(self) -> None:
        assert format_extension_list([]) == "No extensions installed."


class TestMain:
    def test_list_extensions_and_exit(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _write_extension(tmp_path, "test-ext")
        _write_extension(tmp_path / "home", "user-ext", version="0.2.0")
        code = main(["--workspace", str(tmp_path), "--list-extensions"])
        assert code == 0
        out = capsys.readouterr().out
        assert "test-ext (v1.0.0)" in out
        assert "user-ext (v0.2.0)" in out

    def test_list_extensions_none_installed(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["--workspace", str(tmp_path), "-l"]) == 0
        assert "No extensions installed." in capsys.readouterr().out


    def test_startup_warnings_printed_to_stderr(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _write_extension(tmp_path, "ext1")
        (tmp_path / ".gemini" / "extensions" / "stray.txt").write_text("x", encoding="utf-8")
        assert main(["--workspace", str(tmp_path), "-e", "ext3", "-l"]) == 0
        captured = capsys.readouterr()
        assert "Extension not found: ext3" in captured.err
        assert "unexpected file" in captured.err
        assert "ext1 (v1.0.0)" in captured.out
        assert "Loading extension" not in captured.err


class TestRunInteractive:
    @pytest.mark.asyncio
    async def test_enable_then_list_then_quit(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _write_extension(tmp_path, "ext1", enabled=False)
        session = build_session(tmp_path, get_default_settings(), _args(), tmp_path / "home")
        lines = iter(["", "/extensions enable ext1", "/extensions list", "/quit", "/never"])

        await run_interactive(session, build_dispatcher(session), lambda _prompt: next(lines))

        out = capsys.readouterr().out
        assert 'Enabled extension "ext1" for this session.' in out
        assert "- ext1 (v1.0.0) (enabled)" in out
        assert next(lines) == "/never"

    @pytest.mark.asyncio
    async def test_errors_go_to_stderr_and_eof_exits(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        session = ExtensionSession([])
        lines = iter(["/extensions", "plain text"])

        def read_line(_prompt: str) -> str:
            try:
                return next(lines)
            except StopIteration:
                raise EOFError from None

        await run_interactive(session, build_dispatcher(session), read_line)
        captured = capsys.readouterr()
        assert "Usage: /extensions <list|enable|disable> [extension_name]" in captured.err
        assert "Only slash commands" in captured.out
