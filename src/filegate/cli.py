"""``filegate`` command: serve the file routes with uvicorn."""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from filegate.config import FileGateConfig, load_config
from filegate.logging_config import configure_logging
from filegate.server import create_app

logger = logging.getLogger("filegate")

BACKENDS = ("aws", "local", "memory")


def build_parser() -> argparse.ArgumentParser:
    """Command-line options. Every option except ``--config`` overrides a
    value from the YAML file."""
    parser = argparse.ArgumentParser(
        prog="filegate",
        description="Serve /v0/files over HTTP, backed by S3 or a local directory.",
    )
    parser.add_argument("--config", type=Path, metavar="YAML", help="configuration file")

    server = parser.add_argument_group("server")
    server.add_argument("--host", help="bind address")
    server.add_argument("--port", type=int, help="listen port")

    storage = parser.add_argument_group("storage")
    storage.add_argument("--backend", choices=BACKENDS, help="object store backend")
    storage.add_argument(
        "--container",
        help="default container (bucket) name; S3_BUCKET still takes precedence",
    )

    logs = parser.add_argument_group("logging")
    logs.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    logs.add_argument("--log-format", choices=["text", "json"])
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


# (argument name, config section, config field)
_OVERRIDES = (
    ("host", "server", "host"),
    ("port", "server", "port"),
    ("backend", "storage", "backend"),
    ("container", "storage", "container"),
    ("log_level", "logging", "level"),
    ("log_format", "logging", "format"),
)


def apply_overrides(config: FileGateConfig, args: argparse.Namespace) -> FileGateConfig:
    """Copy every option given on the command line into ``config``."""
    for arg, section, field in _OVERRIDES:
        value = getattr(args, arg, None)
        if value is not None:
            setattr(getattr(config, section), field, value)
    return config


def _load(path: Path | None) -> FileGateConfig:
    if path is None:
        return FileGateConfig()
    try:
        return load_config(path)
    except FileNotFoundError:
        logger.error("Config file not found: %s", path)
    except Exception as exc:
        logger.error("Failed to load config %s: %s", path, exc)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Load configuration, apply overrides, and run the app under uvicorn."""
    args = parse_args(argv)

    # Until the configured handler is installed, report config errors plainly.
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    config = apply_overrides(_load(args.config), args)
    configure_logging(config.logging)

    logger.info(
        "Starting FileGate on %s:%d (backend=%s)",
        config.server.host,
        config.server.port,
        config.storage.backend,
    )

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
        timeout_graceful_shutdown=config.server.shutdown_timeout,
    )


if __name__ == "__main__":
    main()
