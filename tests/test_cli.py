"""CLI behavior tests."""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from rtfm import __version__
from rtfm.cli import main
from rtfm.errors import StartupError
from rtfm.models import AppConfig, DocumentKey, SourceKind
from test_helpers import LS_MAN


@pytest.fixture
def no_config(tmp_path, monkeypatch):
    """Point the default config lookup at a file that does not exist."""
    monkeypatch.setattr("rtfm.config.DEFAULT_CONFIG_FILE", str(tmp_path / "absent.json"))


@pytest.fixture
def provider(fake_provider):
    with patch("rtfm.cli.SubprocessProvider", return_value=fake_provider) as factory:
        factory.provider = fake_provider
        yield factory


def _run_cli(capsys, argv):
    """Run main() and capture exit code/stdout/stderr."""
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
        raise SystemExit(0)
    captured = capsys.readouterr()
    return exc_info.value.code, captured.out, captured.err


class TestInfoCommands:
    """Test help and version."""

    def test_help(self, capsys):
        code, out, _err = _run_cli(capsys, ["help"])
        assert code == 0
        assert "Usage: rtfm" in out
        assert "getman <command> [--section N]" in out

    def test_help_flag(self, capsys):
        code, out, _err = _run_cli(capsys, ["--help"])
        assert code == 0
        assert "search <query>" in out

    def test_version(self, capsys):
        code, out, _err = _run_cli(capsys, ["version"])
        assert code == 0
        assert out.strip() == f"rtfm {__version__}"


class TestNonInteractive:
    """Test search/getman/getmans."""

    def test_search_prints_matches_with_descriptions(self, capsys, no_config, provider):
        code, out, _err = _run_cli(capsys, ["search", "l"])
        assert code == 0
        lines = out.strip().splitlines()
        assert lines[0].startswith("ln (1)")
        assert "make links between files" in lines[0]
        assert lines[1].startswith("ls (1)")
        assert len(lines) == 2

    def test_getmans_prints_names(self, capsys, no_config, provider):
        code, out, _err = _run_cli(capsys, ["getmans", "l"])
        assert code == 0
        assert out.strip().splitlines() == ["ln", "ls"]

    def test_getmans_without_matches(self, capsys, no_config, provider):
        code, out, _err = _run_cli(capsys, ["getmans", "zz"])
        assert code == 0
        assert out.strip() == "No matching commands."

    def test_getman_prints_document(self, capsys, no_config, provider):
        code, out, _err = _run_cli(capsys, ["getman", "ls"])
        assert code == 0
        assert out.rstrip("\n") == LS_MAN.rstrip("\n")
        assert provider.provider.calls == [DocumentKey("ls", 1, SourceKind.MAN)]

    def test_getman_section_option(self, capsys, no_config, provider):
        code, _out, err = _run_cli(capsys, ["getman", "ls", "--section", "5"])
        assert code == 1
        assert provider.provider.calls == [DocumentKey("ls", 5, SourceKind.MAN)]
        assert "Error: No documentation for ls(5)" in err

    def test_manpage_option_sets_default_section(self, capsys, no_config, provider):
        _run_cli(capsys, ["-m", "8", "getman", "ls"])
        assert provider.provider.calls == [DocumentKey("ls", 8, SourceKind.MAN)]

    def test_config_default_section(self, capsys, tmp_path, provider):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"default_section": 3}), encoding="utf-8")
        _run_cli(capsys, ["--config", str(config_path), "getman", "ls"])
        assert provider.provider.calls == [DocumentKey("ls", 3, SourceKind.MAN)]

    def test_getman_not_found(self, capsys, no_config, provider):
        code, _out, err = _run_cli(capsys, ["getman", "nosuch"])
        assert code == 1
        assert "Error:" in err

    def test_missing_man_is_fatal(self, capsys, no_config, provider):
        provider.provider.list_failures.add(SourceKind.MAN)
        code, _out, err = _run_cli(capsys, ["search", "l"])
        assert code == 1
        assert "Error: Cannot list man pages" in err


class TestUsageErrors:
    """Test argument validation."""

    @pytest.mark.parametrize(
        "argv,message",
        [
            (["frobnicate"], "unknown command 'frobnicate'"),
            (["search"], "Usage: rtfm search <query>"),
            (["getman"], "Usage: rtfm getman"),
            (["getmans", "a", "b"], "Usage: rtfm getmans <prefix>"),
            (["-m", "0", "search", "l"], "--manpage must be between 1 and 9"),
            (["search", "l", "--section", "2"], "--section is only valid with getman"),
            (["getman", "ls", "--section", "12"], "--section must be between 1 and 9"),
            (["getman", "ls", "extra"], "Usage: rtfm getman"),
        ],
    )
    def test_usage_errors_exit_1(self, capsys, no_config, provider, argv, message):
        code, _out, err = _run_cli(capsys, argv)
        assert code == 1
        assert message in err

    def test_invalid_config_file(self, capsys, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"bogus": 1}), encoding="utf-8")
        code, _out, err = _run_cli(capsys, ["--config", str(config_path), "search", "l"])
        assert code == 1
        assert "Unknown config keys: bogus" in err


class TestInteractive:
    """Test interactive startup wiring."""

    def test_session_runs_with_config(self, capsys, no_config):
        with patch("rtfm.cli.run_session", new=AsyncMock(return_value="quit")) as run:
            code, _out, _err = _run_cli(capsys, ["-m", "2"])

        assert code == 0
        config = run.await_args.args[0]
        assert isinstance(config, AppConfig)
        assert config.default_section == 2

    def test_startup_error_is_reported(self, capsys, no_config):
        failing = AsyncMock(side_effect=StartupError("man is not installed"))
        with patch("rtfm.cli.run_session", new=failing):
            code, _out, err = _run_cli(capsys, [])
        assert code == 1
        assert "Error: man is not installed" in err

    def test_keyboard_interrupt_exits_cleanly(self, capsys, no_config):
        with patch("rtfm.cli.run_session", new=AsyncMock(side_effect=KeyboardInterrupt)):
            code, _out, _err = _run_cli(capsys, [])
        assert code == 0

    def test_unexpected_error_exits_1(self, capsys, no_config):
        with patch("rtfm.cli.run_session", new=AsyncMock(side_effect=RuntimeError("kaboom"))):
            code, _out, err = _run_cli(capsys, [])
        assert code == 1
        assert "Error: kaboom" in err

    def test_log_option_writes_log_file(self, capsys, no_config, tmp_path):
        log_file = tmp_path / "run.log"
        with patch("rtfm.cli.run_session", new=AsyncMock(return_value="quit")):
            _run_cli(capsys, ["-l", str(log_file)])
        for handler in list(logging.getLogger().handlers):
            handler.close()
            logging.getLogger().removeHandler(handler)
        text = log_file.read_text(encoding="utf-8")
        assert "=== app_start ===" in text
        assert "mode: interactive" in text
        assert "=== app_stop ===" in text


def test_not_found_message_names_page(capsys, no_config, provider):
    code, _out, err = _run_cli(capsys, ["getman", "nosuch", "-s", "1"])
    assert code == 1
    assert err.strip() == "Error: No documentation for nosuch(1)"
