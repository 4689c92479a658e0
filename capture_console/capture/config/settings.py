"""Configuration loading + normalization helpers for the capture console."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from capture_console.cli.common import add_common_cli_arguments, positive_float
from capture_console.core.paths import DEFAULT_CONFIG_PATH

INTERACTION_MODES: tuple[str, str] = ("gui", "cli")
BACKENDS: tuple[str, str] = ("http", "local")


@dataclass(slots=True)
class CaptureSettings:
    """Normalized configuration derived from CLI args and config file."""

    mode: str = "gui"
    backend: str = "http"
    service_url: str = "http://127.0.0.1:8765"
    poll_interval: float = 0.5
    request_timeout: float = 10.0
    log_level: str = "info"
    log_file: Path | None = None
    console_output: bool = True
    window_geometry: str | None = None
    shutdown_timeout: float = 5.0
    driver_dirs: tuple[Path, ...] = field(default_factory=tuple)

    @classmethod
    def from_args(cls, args: Any) -> "CaptureSettings":
        """Create a settings instance from an argparse namespace."""

        defaults = cls()
        log_file = getattr(args, "log_file", None)
        return cls(
            mode=_normalize_choice(getattr(args, "mode", defaults.mode), INTERACTION_MODES),
            backend=_normalize_choice(getattr(args, "backend", defaults.backend), BACKENDS),
            service_url=str(getattr(args, "service_url", None) or defaults.service_url),
            poll_interval=float(getattr(args, "poll_interval", defaults.poll_interval)),
            request_timeout=float(getattr(args, "request_timeout", defaults.request_timeout)),
            log_level=str(getattr(args, "log_level", defaults.log_level)),
            log_file=Path(log_file) if log_file else None,
            console_output=bool(getattr(args, "console_output", defaults.console_output)),
            window_geometry=getattr(args, "window_geometry", None),
            shutdown_timeout=float(getattr(args, "shutdown_timeout", defaults.shutdown_timeout)),
            driver_dirs=_parse_dirs(getattr(args, "driver_dirs", None)),
        )


def read_config_file(path: Path) -> dict[str, object]:
    """Load key/value pairs from ``config.txt`` style files."""

    config: dict[str, object] = {}
    if not path.exists():
        return config

    text = path.read_text(encoding="utf-8")
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = [part.strip() for part in line.split("=", 1)]
        if not key:
            continue
        if "#" in value:
            value = value.split("#", 1)[0].strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            config[key] = value[1:-1]
            continue
        lowered = value.lower()
        if lowered in {"true", "yes", "on"}:
            config[key] = True
        elif lowered in {"false", "no", "off"}:
            config[key] = False
        elif lowered in {"", "none"}:
            config[key] = None
        else:
            try:
                if "." in value:
                    config[key] = float(value)
                else:
                    config[key] = int(value)
            except ValueError:
                config[key] = value
    return config


def _config_value(config: Mapping[str, object], key: str, fallback: Any) -> Any:
    value = config.get(key, fallback)
    if value is None:
        return fallback
    if isinstance(fallback, Path) or (key.endswith("_file") and isinstance(value, str)):
        return Path(str(value))
    return value


def build_arg_parser(config: Mapping[str, object]) -> argparse.ArgumentParser:
    """Create the CLI parser with defaults sourced from the config file."""

    defaults = CaptureSettings()
    parser = argparse.ArgumentParser(
        prog="capture-console",
        description="Control panel for the packet capture service",
    )

    parser.add_argument(
        "--mode",
        choices=INTERACTION_MODES,
        default=_normalize_choice(_config_value(config, "mode", defaults.mode), INTERACTION_MODES),
        help="Interaction mode: 'gui' opens the Tk panel, 'cli' reads commands from stdin",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=_normalize_choice(_config_value(config, "backend", defaults.backend), BACKENDS),
        help="'http' talks to a capture service, 'local' runs the service in-process",
    )
    parser.add_argument(
        "--service-url",
        type=str,
        default=_config_value(config, "service_url", defaults.service_url),
        help="Base URL of the capture service REST API",
    )
    parser.add_argument(
        "--poll-interval",
        type=positive_float,
        default=_config_value(config, "poll_interval", defaults.poll_interval),
        help="Seconds between status polls while capturing",
    )
    parser.add_argument(
        "--request-timeout",
        type=positive_float,
        default=_config_value(config, "request_timeout", defaults.request_timeout),
        help="Seconds before an HTTP request to the capture service is abandoned",
    )
    parser.add_argument(
        "--window-geometry",
        type=str,
        default=_config_value(config, "window_geometry", defaults.window_geometry),
        help="Initial window geometry (WIDTHxHEIGHT+X+Y) in GUI mode",
    )
    parser.add_argument(
        "--shutdown-timeout",
        type=positive_float,
        default=_config_value(config, "shutdown_timeout", defaults.shutdown_timeout),
        help="Seconds to wait for background tasks on exit",
    )
    parser.add_argument(
        "--driver-dir",
        dest="driver_dirs",
        action="append",
        type=Path,
        default=None,
        help="Extra directory searched for the capture driver (local backend, repeatable)",
    )
    add_common_cli_arguments(
        parser,
        default_log_level=str(_config_value(config, "log_level", defaults.log_level)),
        default_log_file=_config_value(config, "log_file", defaults.log_file),
        default_console_output=bool(_config_value(config, "console_output", defaults.console_output)),
    )
    parser.set_defaults(config_driver_dirs=config.get("driver_dirs"))
    return parser


def _pre_parse_config_path(argv: list[str] | None) -> Path | None:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=Path, default=None)
    known, _ = pre.parse_known_args(argv)
    return known.config


def parse_cli_args(
    argv: list[str] | None = None,
    *,
    config_path: Path | None = None,
) -> argparse.Namespace:
    """Parse CLI arguments using configuration defaults.

    ``--config`` on the command line wins over ``config_path``.
    """

    path = _pre_parse_config_path(argv) or config_path or DEFAULT_CONFIG_PATH
    config = read_config_file(path)
    parser = build_arg_parser(config)
    args = parser.parse_args(argv)
    if not args.driver_dirs:
        args.driver_dirs = args.config_driver_dirs
    args.config = path
    return args


def _parse_dirs(value: Any) -> tuple[Path, ...]:
    if not value:
        return ()
    if isinstance(value, (str, Path)):
        items = str(value).split(",")
    else:
        items = list(value)
    return tuple(Path(str(item).strip()) for item in items if str(item).strip())


def _normalize_choice(value: Any, choices: tuple[str, ...]) -> str:
    text = str(value or "").strip().lower()
    if text == "headless":
        text = "cli"
    if text in choices:
        return text
    return choices[0]


__all__ = [
    "BACKENDS",
    "CaptureSettings",
    "INTERACTION_MODES",
    "build_arg_parser",
    "parse_cli_args",
    "read_config_file",
]
