"""
Unit tests for the command-line entry point and logging setup.
"""

import logging
import socket

import pytest

from webserver import __main__ as cli
from webserver import __version__
from webserver.logs import LOG_FORMAT, setup_logging


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("HOST", "PORT", "ROOT", "WORKERS", "LOG_LEVEL"):
        monkeypatch.delenv(f"WEBSERVER_{name}", raising=False)


@pytest.fixture
def no_logging_setup(monkeypatch):
    """Keep main() from reconfiguring the root logger under pytest."""
    calls = []
    monkeypatch.setattr(cli, "setup_logging", lambda *args: calls.append(args))
    return calls


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    webserver_level = logging.getLogger("webserver").level

    yield root

    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    logging.getLogger("webserver").setLevel(webserver_level)


class TestParser:

    def test_defaults(self):
        args = cli.build_parser().parse_args([])

        assert args.config is None
        assert args.port is None
        assert args.root_dir is None

    def test_log_level_upper_cased(self):
        assert cli.build_parser().parse_args(["-l", "debug"]).log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--log-level", "chatty"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestLoadConfig:

    def test_cli_overrides_file(self, tmp_path):
        path = tmp_path / "webserver.toml"
        path.write_text('[server]\nport = 3000\nhost = "0.0.0.0"\n', encoding="utf-8")

        args = cli.build_parser().parse_args(["-c", str(path), "-p", "9000", "-r", "/srv"])
        config = cli.load_config(args)

        assert config.port == 9000
        assert config.host == "0.0.0.0"
        assert config.root_dir == "/srv"

    def test_environment_without_file(self, monkeypatch):
        monkeypatch.setenv("WEBSERVER_PORT", "4000")

        config = cli.load_config(cli.build_parser().parse_args([]))
        assert config.port == 4000

    def test_invalid_override(self):
        args = cli.build_parser().parse_args(["--port", "70000"])

        with pytest.raises(cli.ConfigError):
            cli.load_config(args)


class TestMain:
    """Exit codes of main()."""

    def test_missing_config_file(self, tmp_path, capsys, no_logging_setup):
        code = cli.main(["--config", str(tmp_path / "nope.toml")])

        assert code == cli.EXIT_CONFIG_ERROR
        assert "Problem reading config" in capsys.readouterr().err
        assert no_logging_setup == []

    def test_missing_document_root(self, tmp_path, capsys, no_logging_setup):
        code = cli.main(["--root", str(tmp_path / "missing")])

        assert code == cli.EXIT_CONFIG_ERROR
        assert "Document root does not exist" in capsys.readouterr().err

    def test_port_in_use(self, tmp_path, no_logging_setup):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            code = cli.main(["--port", str(port), "--root", str(tmp_path)])

        assert code == cli.EXIT_BIND_ERROR
        assert no_logging_setup == [("INFO", None)]


class TestSetupLogging:

    def test_level_and_format(self, restore_root_logger):
        setup_logging("debug")

        assert restore_root_logger.level == logging.DEBUG
        assert logging.getLogger("webserver").level == logging.DEBUG
        assert restore_root_logger.handlers[0].formatter._fmt == LOG_FORMAT

    def test_log_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "log_files" / "webserver.log"
        setup_logging("INFO", log_file)

        logging.getLogger("webserver.test").info("hello from the test")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "[INFO] webserver.test: hello from the test" in log_file.read_text(encoding="utf-8")
