"""
Unit tests for server configuration.
"""

import logging
import os

import pytest

from cgihttpd.config import ServerConfig, ServerContext
from cgihttpd.http.framing import FramingLimits


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        """Test default values."""
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.interpreter == ("php-cgi",)
        assert config.timeout is None
        assert config.script_timeout is None
        assert config.limits == FramingLimits()

    def test_limits(self):
        """Test that the limit fields feed FramingLimits."""
        config = ServerConfig(request_line_limit=100, fields_limit=2, field_size_limit=30, chunk_size=16)
        assert config.limits == FramingLimits(100, 2, 30, 16)

    def test_from_env(self, monkeypatch):
        """Test reading the environment."""
        monkeypatch.setenv("CGIHTTPD_HOST", "127.0.0.1")
        monkeypatch.setenv("CGIHTTPD_PORT", "3000")
        monkeypatch.setenv("CGIHTTPD_ROOT", "/srv/www")
        monkeypatch.setenv("CGIHTTPD_INTERPRETER", "/usr/bin/php-cgi -d 'display_errors=1'")
        monkeypatch.setenv("CGIHTTPD_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.root == "/srv/www"
        assert config.interpreter == ("/usr/bin/php-cgi", "-d", "display_errors=1")
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"request_line_limit": 0},
        {"fields_limit": 0},
        {"field_size_limit": 0},
        {"chunk_size": 0},
        {"backlog": 0},
        {"interpreter": ()},
        {"log_level": "LOUD"},
        {"timeout": 0},
        {"script_timeout": -1.0},
    ])
    def test_validate_rejects(self, kwargs):
        """Test invalid settings."""
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_validate_accepts_port_zero(self):
        """Test that port 0 (OS-chosen) is valid."""
        ServerConfig(port=0).validate()

    def test_numeric_log_level(self):
        """Test the log level conversion."""
        assert ServerConfig(log_level="debug").numeric_log_level == logging.DEBUG


class TestServerContext:
    """Tests for ServerConfig.to_context()."""

    def test_to_context(self, tmp_path):
        """Test freezing a valid configuration."""
        config = ServerConfig(root=str(tmp_path), interpreter=["php-cgi", "-q"], script_timeout=3.0)
        context = config.to_context()

        assert isinstance(context, ServerContext)
        assert context.root == os.path.realpath(str(tmp_path))
        assert context.interpreter == ("php-cgi", "-q")
        assert context.script_timeout == 3.0

    def test_root_resolved(self, tmp_path):
        """Test that relative parts and symlinks are resolved."""
        (tmp_path / "real").mkdir()
        os.symlink(str(tmp_path / "real"), str(tmp_path / "link"))

        context = ServerConfig(root=str(tmp_path / "link" / ".." / "link")).to_context()
        assert context.root == os.path.realpath(str(tmp_path / "real"))

    def test_root_missing(self, tmp_path):
        """Test a root that does not exist."""
        with pytest.raises(ValueError):
            ServerConfig(root=str(tmp_path / "missing")).to_context()

    def test_root_is_file(self, tmp_path):
        """Test a root that is a file."""
        path = tmp_path / "file.html"
        path.write_bytes(b"")
        with pytest.raises(ValueError):
            ServerConfig(root=str(path)).to_context()

    def test_context_is_frozen(self, tmp_path):
        """Test immutability."""
        context = ServerConfig(root=str(tmp_path)).to_context()
        with pytest.raises(AttributeError):
            context.root = "/"
