"""
Unit tests for sftp_treeops.config module.

Tests cover:
- Loading configuration from INI files
- Environment variables overriding the file
- CLI override precedence (CLI wins over environment and INI)
- Missing required field validation
- Missing config file handling
- Invalid integer values
"""

from pathlib import Path

import pytest

from sftp_treeops.config import (
    AppConfig,
    ConnectionConfig,
    LogConfig,
    SSHConfig,
    load_config,
)


class TestLoadConfigWithINIFile:
    """Tests for load_config with INI file."""

    def test_load_config_reads_all_sections(self, tmp_config_file: Path):
        config = load_config(str(tmp_config_file), env={})

        assert config.ssh.host == "testserver.local"
        assert config.ssh.port == 2222
        assert config.ssh.username == "testuser"
        assert config.ssh.password == "testpass"
        assert config.ssh.key_file == "~/.ssh/id_test"
        assert config.ssh.use_agent is False

        assert config.connection.timeout_seconds == 45
        assert config.connection.retry_attempts == 3
        assert config.connection.retry_delay_seconds == 2

        assert config.logging.level == "DEBUG"
        assert config.logging.file == "test.log"
        assert config.logging.console is False

    def test_load_config_returns_appconfig_type(self, tmp_config_file: Path):
        config = load_config(str(tmp_config_file), env={})

        assert isinstance(config, AppConfig)
        assert isinstance(config.ssh, SSHConfig)
        assert isinstance(config.connection, ConnectionConfig)
        assert isinstance(config.logging, LogConfig)

    def test_load_config_minimal_file(self, minimal_config_file: Path):
        """Only the host is required; everything else has defaults."""
        config = load_config(str(minimal_config_file), env={})

        assert config.ssh.host == "minimal.server.com"
        assert config.ssh.port == 22
        assert config.ssh.username is None
        assert config.ssh.use_agent is True
        assert config.connection.timeout_seconds == 30
        assert config.connection.retry_attempts == 1
        assert config.logging.level == "INFO"
        assert config.logging.file == ""
        assert config.logging.console is True

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.ini"), env={})

    def test_invalid_port_raises(self, tmp_path: Path):
        config_path = tmp_path / "bad.ini"
        config_path.write_text("[ssh]\nhost = h\nport = twenty-two\n", encoding="utf-8")

        with pytest.raises(ValueError, match="port"):
            load_config(str(config_path), env={})

    def test_invalid_retry_attempts_raises(self, tmp_path: Path):
        config_path = tmp_path / "bad.ini"
        config_path.write_text(
            "[ssh]\nhost = h\n[connection]\nretry_attempts = many\n", encoding="utf-8"
        )

        with pytest.raises(ValueError, match="retry_attempts"):
            load_config(str(config_path), env={})


class TestLoadConfigEnvironment:
    """Tests for SFTP_* environment variables."""

    def test_env_only(self):
        config = load_config(
            env={
                "SFTP_HOST": "env.server",
                "SFTP_PORT": "2200",
                "SFTP_USERNAME": "envuser",
                "SFTP_PASSWORD": "envpass",
            }
        )

        assert config.ssh.host == "env.server"
        assert config.ssh.port == 2200
        assert config.ssh.username == "envuser"
        assert config.ssh.password == "envpass"

    def test_env_overrides_file(self, tmp_config_file: Path):
        config = load_config(str(tmp_config_file), env={"SFTP_HOST": "env.server"})

        assert config.ssh.host == "env.server"
        assert config.ssh.username == "testuser"

    def test_invalid_env_port(self):
        with pytest.raises(ValueError, match="SFTP_PORT"):
            load_config(env={"SFTP_HOST": "h", "SFTP_PORT": "abc"})


class TestLoadConfigCLI:
    """Tests for CLI argument precedence."""

    def test_cli_only(self):
        config = load_config(
            env={}, host="cli.server", port=2022, username="cliuser", password="clipass"
        )

        assert config.ssh.host == "cli.server"
        assert config.ssh.port == 2022
        assert config.ssh.username == "cliuser"
        assert config.ssh.password == "clipass"

    def test_cli_overrides_env_and_file(self, tmp_config_file: Path):
        config = load_config(
            str(tmp_config_file),
            env={"SFTP_HOST": "env.server", "SFTP_PORT": "2200"},
            host="cli.server",
        )

        assert config.ssh.host == "cli.server"
        assert config.ssh.port == 2200

    def test_none_cli_values_do_not_override(self, tmp_config_file: Path):
        config = load_config(str(tmp_config_file), env={}, host=None, username=None)

        assert config.ssh.host == "testserver.local"
        assert config.ssh.username == "testuser"

    def test_debug_flag_forces_console_debug(self, tmp_config_file: Path):
        config = load_config(str(tmp_config_file), env={}, debug=True)

        assert config.logging.level == "DEBUG"
        assert config.logging.console is True

    def test_key_file_from_cli(self):
        config = load_config(env={}, host="h", key_file="~/.ssh/id_ed25519", key_passphrase="pw")

        assert config.ssh.key_file == "~/.ssh/id_ed25519"
        assert config.ssh.key_passphrase == "pw"

    def test_missing_host_raises(self):
        with pytest.raises(ValueError, match="host"):
            load_config(env={})
