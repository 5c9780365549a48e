"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 31337
DEFAULT_ACCEPT_POLL_SECONDS = 0.5
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMATS = ["json", "text"]


@dataclass
class ServerConfig:
    """Resolved settings for one server process."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    accept_poll_seconds: float = DEFAULT_ACCEPT_POLL_SECONDS
    log_level: str = "INFO"
    log_destination: str = "stdout"
    log_format: str = "json"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        return cls(
            host=args.host,
            port=args.port,
            accept_poll_seconds=args.accept_poll_seconds,
            log_level=args.log_level,
            log_destination=args.log_destination,
            log_format=args.log_format,
        )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments, with defaults seeded from the environment."""
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.1 server")
    parser.add_argument("--host", default=_env_str("HTTPENGINE_HOST", DEFAULT_HOST))
    parser.add_argument(
        "--port", type=int, default=_env_int("HTTPENGINE_PORT", DEFAULT_PORT)
    )
    parser.add_argument(
        "--log-level",
        default=_env_str("HTTPENGINE_LOG_LEVEL", "INFO").upper(),
        choices=LOG_LEVELS,
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=_env_str("HTTPENGINE_LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=_env_str("HTTPENGINE_LOG_FORMAT", "json").lower(),
        choices=LOG_FORMATS,
        type=str.lower,
    )
    parser.add_argument(
        "--accept-poll-seconds",
        type=float,
        default=_env_float(
            "HTTPENGINE_ACCEPT_POLL_SECONDS", DEFAULT_ACCEPT_POLL_SECONDS
        ),
        help="How often the accept loop checks whether it has been closed",
    )
    return parser.parse_args(argv)
