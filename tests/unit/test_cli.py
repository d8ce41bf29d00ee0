"""
Unit tests for the command-line interface.
"""

import pytest

from cgihttpd import __main__ as cli


class RecordingServer:
    """Stands in for HTTPServer; records the config instead of serving."""

    instances = []

    def __init__(self, config):
        self.config = config
        self.ran = False
        RecordingServer.instances.append(self)

    def run(self):
        self.ran = True


class FailingServer:
    def __init__(self, config):
        pass

    def run(self):
        raise OSError("Address already in use")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HOST", "PORT", "ROOT", "INTERPRETER", "LOG_LEVEL"):
        monkeypatch.delenv(f"CGIHTTPD_{name}", raising=False)


@pytest.fixture
def recording(monkeypatch):
    RecordingServer.instances = []
    monkeypatch.setattr(cli, "HTTPServer", RecordingServer)
    return RecordingServer


class TestCLI:
    """Tests for main()."""

    def test_help(self, capsys):
        """Test that -h prints usage and exits 0."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-h"])

        assert exc_info.value.code == 0
        assert "usage: cgihttpd" in capsys.readouterr().out

    def test_missing_root(self, capsys):
        """Test that the root argument is required."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err

    def test_root_not_a_directory(self, tmp_path, capsys):
        """Test a root that does not exist."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(tmp_path / "missing")])

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err

    @pytest.mark.parametrize("port", ["-1", "70000", "http"])
    def test_bad_port(self, tmp_path, port):
        """Test ports outside 0-65535 or not numbers."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-p", port, str(tmp_path)])

        assert exc_info.value.code == 2

    def test_empty_interpreter(self, tmp_path):
        """Test an empty interpreter command line."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--interpreter", "", str(tmp_path)])

        assert exc_info.value.code == 2

    def test_builds_config(self, tmp_path, recording):
        """Test that arguments reach the server configuration."""
        status = cli.main([
            "-p", "3000",
            "-l", "DEBUG",
            "--host", "127.0.0.1",
            "--interpreter", "php-cgi -d short_open_tag=1",
            str(tmp_path),
        ])

        assert status == 0
        server = recording.instances[0]
        assert server.ran
        assert server.config.port == 3000
        assert server.config.host == "127.0.0.1"
        assert server.config.log_level == "DEBUG"
        assert server.config.root == str(tmp_path)
        assert server.config.interpreter == ("php-cgi", "-d", "short_open_tag=1")

    def test_defaults(self, tmp_path, recording):
        """Test the default port and interpreter."""
        cli.main([str(tmp_path)])

        config = recording.instances[0].config
        assert config.port == 8080
        assert config.interpreter == ("php-cgi",)

    def test_environment_defaults(self, tmp_path, recording, monkeypatch):
        """Test that CGIHTTPD_* variables replace the built-in defaults."""
        monkeypatch.setenv("CGIHTTPD_PORT", "3000")
        monkeypatch.setenv("CGIHTTPD_INTERPRETER", "/usr/bin/php-cgi")
        monkeypatch.setenv("CGIHTTPD_HOST", "127.0.0.1")
        monkeypatch.setenv("CGIHTTPD_LOG_LEVEL", "debug")

        assert cli.main([str(tmp_path)]) == 0

        config = recording.instances[0].config
        assert config.port == 3000
        assert config.interpreter == ("/usr/bin/php-cgi",)
        assert config.host == "127.0.0.1"
        assert config.log_level == "DEBUG"

    def test_flags_override_environment(self, tmp_path, recording, monkeypatch):
        """Test that command-line flags win over the environment."""
        monkeypatch.setenv("CGIHTTPD_PORT", "3000")
        monkeypatch.setenv("CGIHTTPD_INTERPRETER", "/usr/bin/php-cgi")

        cli.main(["-p", "9000", "--interpreter", "php-cgi8.2", str(tmp_path)])

        config = recording.instances[0].config
        assert config.port == 9000
        assert config.interpreter == ("php-cgi8.2",)

    def test_root_from_environment(self, tmp_path, recording, monkeypatch):
        """Test that ROOT may be omitted when CGIHTTPD_ROOT is set."""
        monkeypatch.setenv("CGIHTTPD_ROOT", str(tmp_path))

        assert cli.main([]) == 0
        assert recording.instances[0].config.root == str(tmp_path)

    def test_root_argument_beats_environment(self, tmp_path, recording, monkeypatch):
        """Test that an explicit ROOT wins over CGIHTTPD_ROOT."""
        other = tmp_path / "other"
        other.mkdir()
        monkeypatch.setenv("CGIHTTPD_ROOT", str(tmp_path))

        cli.main([str(other)])

        assert recording.instances[0].config.root == str(other)

    @pytest.mark.parametrize("name,value", [
        ("CGIHTTPD_PORT", "http"),
        ("CGIHTTPD_LOG_LEVEL", "LOUD"),
    ])
    def test_bad_environment_value(self, tmp_path, monkeypatch, capsys, name, value):
        """Test that an unusable environment value is a usage error."""
        monkeypatch.setenv(name, value)

        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(tmp_path)])

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err

    def test_startup_failure(self, tmp_path, monkeypatch, capsys):
        """Test that a server that cannot start exits 1."""
        monkeypatch.setattr(cli, "HTTPServer", FailingServer)

        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(tmp_path)])

        assert exc_info.value.code == 1
        assert "Address already in use" in capsys.readouterr().err
