"""Configuration loader for pruxy."""

from __future__ import annotations

import dataclasses
import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants
from .core import ConfigurationError


@dataclass(slots=True)
class PrinterConfig:
    address: str = ""
    username: str = constants.DEFAULT_USERNAME
    password: str = ""
    timeout_seconds: float = constants.DEFAULT_TIMEOUT_SECONDS


@dataclass(slots=True)
class ServerConfig:
    bind: str = constants.DEFAULT_BIND
    metrics_path: str = constants.DEFAULT_METRICS_PATH

    @property
    def host(self) -> Optional[str]:
        return parse_bind(self.bind)[0]

    @property
    def port(self) -> int:
        return parse_bind(self.bind)[1]


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class PruxyConfig:
    printer: PrinterConfig
    server: ServerConfig
    logging: LoggingConfig
    path: Path

    def validate(self) -> None:
        """Reject configurations the service cannot start with."""

        if not self.printer.address.strip():
            raise ConfigurationError("address is required")
        if not self.server.metrics_path.startswith("/"):
            raise ConfigurationError(
                f"metrics_path must start with '/': {self.server.metrics_path!r}"
            )
        parse_bind(self.server.bind)


def parse_bind(value: str) -> tuple[Optional[str], int]:
    """Split a ``host:port`` listen address; an empty host means all interfaces."""

    host_part, sep, port_part = value.strip().rpartition(":")
    if not sep:
        host_part, port_part = "", value.strip()
    try:
        port = int(port_part)
    except ValueError:
        raise ConfigurationError(f"invalid listen address: {value!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"invalid listen port: {port}")
    host = host_part.strip("[]") or None
    return host, port


def load_config(path: Optional[Path] = None) -> PruxyConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser(interpolation=None)
    parser.read_dict(
        {
            "printer": {
                "address": "",
                "username": constants.DEFAULT_USERNAME,
                "password": os.environ.get(constants.PASSWORD_ENV_VAR, ""),
                "timeout_seconds": str(constants.DEFAULT_TIMEOUT_SECONDS),
            },
            "server": {
                "bind": constants.DEFAULT_BIND,
                "metrics_path": constants.DEFAULT_METRICS_PATH,
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    try:
        timeout_value = parser.getfloat(
            "printer", "timeout_seconds", fallback=constants.DEFAULT_TIMEOUT_SECONDS
        )
    except ValueError:
        timeout_value = constants.DEFAULT_TIMEOUT_SECONDS
    if timeout_value <= 0:
        timeout_value = constants.DEFAULT_TIMEOUT_SECONDS

    printer = PrinterConfig(
        address=parser.get("printer", "address").strip(),
        username=parser.get("printer", "username"),
        password=parser.get("printer", "password"),
        timeout_seconds=timeout_value,
    )

    server = ServerConfig(
        bind=parser.get("server", "bind"),
        metrics_path=parser.get("server", "metrics_path"),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return PruxyConfig(
        printer=printer,
        server=server,
        logging=logging_config,
        path=config_path,
    )


def apply_overrides(
    config: PruxyConfig,
    *,
    bind: Optional[str] = None,
    address: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> PruxyConfig:
    """Return a copy of ``config`` with command-line values taking precedence."""

    printer_changes: dict[str, object] = {}
    if address is not None:
        printer_changes["address"] = address.strip()
    if username is not None:
        printer_changes["username"] = username
    if password is not None:
        printer_changes["password"] = password
    if timeout_seconds is not None:
        if timeout_seconds <= 0:
            raise ConfigurationError(f"timeout must be positive: {timeout_seconds}")
        printer_changes["timeout_seconds"] = timeout_seconds

    server = config.server
    if bind is not None:
        server = dataclasses.replace(server, bind=bind)

    return dataclasses.replace(
        config,
        printer=dataclasses.replace(config.printer, **printer_changes),
        server=server,
    )
