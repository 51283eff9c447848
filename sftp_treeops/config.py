import configparser
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

ENV_PREFIX = "SFTP_"


@dataclass
class SSHConfig:
    host: str
    port: int = 22
    username: str | None = None
    password: str | None = None
    key_file: str | None = None  # Path to SSH private key
    key_passphrase: str | None = None  # Passphrase for encrypted keys
    use_agent: bool = True  # Try SSH agent for auth


@dataclass
class ConnectionConfig:
    timeout_seconds: int = 30
    retry_attempts: int = 1  # Transport reconnects only; 1 means no retry
    retry_delay_seconds: int = 1


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str = ""
    console: bool = True


@dataclass
class AppConfig:
    ssh: SSHConfig
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _parse_int(section: str, key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"Invalid {key} value in [{section}]: '{value}' - must be an integer"
        ) from None


def load_config(
    config_path: str | None = None, env: Mapping[str, str] | None = None, **cli_args
) -> AppConfig:
    """
    Load configuration from an INI file, the environment and CLI arguments.
    CLI arguments take precedence over the environment, which takes
    precedence over the config file.

    Args:
        config_path: Path to the INI configuration file.
        env: Environment mapping to read SFTP_* variables from
            (defaults to os.environ).
        **cli_args: Key-value pairs from command line arguments.

    Returns:
        AppConfig: The populated configuration object.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If the host is missing or a numeric field is invalid.
    """
    if env is None:
        env = os.environ

    ssh_config = {
        "host": None,
        "port": 22,
        "username": None,
        "password": None,
        "key_file": None,
        "key_passphrase": None,
        "use_agent": True,
    }
    connection_config = {
        "timeout_seconds": 30,
        "retry_attempts": 1,
        "retry_delay_seconds": 1,
    }
    log_config = {
        "level": "INFO",
        "file": "",
        "console": True,
    }

    # Parse INI file if provided
    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        # Load [ssh] section
        if parser.has_section("ssh"):
            ssh_section = parser["ssh"]
            for key in ("host", "username", "password", "key_file", "key_passphrase"):
                if ssh_section.get(key):
                    ssh_config[key] = ssh_section.get(key)
            if ssh_section.get("port"):
                ssh_config["port"] = _parse_int("ssh", "port", ssh_section.get("port"))
            if ssh_section.get("use_agent"):
                ssh_config["use_agent"] = _parse_bool(ssh_section.get("use_agent"))

        # Load [connection] section
        if parser.has_section("connection"):
            conn_section = parser["connection"]
            for key in connection_config:
                if conn_section.get(key):
                    connection_config[key] = _parse_int("connection", key, conn_section.get(key))

        # Load [logging] section
        if parser.has_section("logging"):
            log_section = parser["logging"]
            if log_section.get("level"):
                log_config["level"] = log_section.get("level")
            if log_section.get("file"):
                log_config["file"] = log_section.get("file")
            if log_section.get("console"):
                log_config["console"] = _parse_bool(log_section.get("console"))

    # Environment overrides the file
    for key in ("host", "username", "password", "key_file"):
        value = env.get(ENV_PREFIX + key.upper())
        if value:
            ssh_config[key] = value
    if env.get(ENV_PREFIX + "PORT"):
        ssh_config["port"] = _parse_int("environment", "SFTP_PORT", env[ENV_PREFIX + "PORT"])

    # Override with CLI arguments (cli_args take precedence)
    for key in ("host", "username", "password", "key_file", "key_passphrase"):
        if cli_args.get(key) is not None:
            ssh_config[key] = cli_args[key] or None
    if cli_args.get("port") is not None:
        ssh_config["port"] = int(cli_args["port"])
    if cli_args.get("debug"):
        log_config["level"] = "DEBUG"
        log_config["console"] = True

    if not ssh_config["host"]:
        raise ValueError("Missing required configuration fields: host")

    return AppConfig(
        ssh=SSHConfig(**ssh_config),
        connection=ConnectionConfig(**connection_config),
        logging=LogConfig(**log_config),
    )
