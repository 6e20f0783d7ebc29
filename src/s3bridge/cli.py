"""Command-line entry point: load config, apply overrides, serve."""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from s3bridge.config import S3BridgeConfig, load_config
from s3bridge.logging_config import configure_logging
from s3bridge.server import create_app

logger = logging.getLogger("s3bridge")

# (argument dest, config section, config field) for plain one-to-one overrides
_OVERRIDES = (
    ("host", "server", "host"),
    ("port", "server", "port"),
    ("log_level", "server", "log_level"),
    ("log_format", "server", "log_format"),
    ("shutdown_timeout", "server", "shutdown_timeout"),
    ("metadata_engine", "metadata", "engine"),
    ("storage_backend", "storage", "backend"),
    ("lookup_scope", "mapping", "lookup_scope"),
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments. Every option left unset keeps the config value."""
    parser = argparse.ArgumentParser(
        prog="s3bridge",
        description="S3-style gateway over an object store and a filename-to-object index",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("s3bridge.yaml"),
        help="YAML configuration file (default: s3bridge.yaml)",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help="Address to bind")
    server.add_argument("--port", type=int, help="Port to listen on")
    server.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    server.add_argument("--log-format", choices=["text", "json"])
    server.add_argument(
        "--shutdown-timeout",
        type=int,
        help="Seconds to wait for in-flight requests on shutdown",
    )

    backends = parser.add_argument_group("backends")
    backends.add_argument("--metadata-engine", choices=["sqlite", "memory"])
    backends.add_argument("--storage-backend", choices=["local", "memory"])
    backends.add_argument(
        "--data-dir",
        type=Path,
        help="Keep the SQLite index and local objects under this directory",
    )
    backends.add_argument(
        "--lookup-scope",
        choices=["global", "bucket"],
        help="Whether Put and Get match mappings by filename alone or by bucket too",
    )
    return parser.parse_args(argv)


def apply_overrides(config: S3BridgeConfig, args: argparse.Namespace) -> S3BridgeConfig:
    """Copy every option given on the command line into ``config``.

    ``--data-dir`` places ``metadata.db`` and ``objects/`` under one
    directory, replacing both configured paths.
    """
    for dest, section, field in _OVERRIDES:
        value = getattr(args, dest, None)
        if value is not None:
            setattr(getattr(config, section), field, value)

    if args.data_dir is not None:
        config.metadata.sqlite_path = str(args.data_dir / "metadata.db")
        config.storage.local_root = str(args.data_dir / "objects")
    return config


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # Until configure_logging runs, config errors still need to reach stderr
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        logger.error("Config file not found: %s", args.config)
        sys.exit(1)
    except Exception as exc:
        logger.error("Failed to load config %s: %s", args.config, exc)
        sys.exit(1)

    config = apply_overrides(config, args)
    configure_logging(level=config.server.log_level, fmt=config.server.log_format)

    if config.metadata.engine == "memory" or config.storage.backend == "memory":
        logger.warning("In-memory backend selected; mappings and objects are lost on exit")
    logger.info(
        "Serving on %s:%d (metadata=%s at %s, storage=%s at %s, lookup_scope=%s)",
        config.server.host,
        config.server.port,
        config.metadata.engine,
        config.metadata.sqlite_path,
        config.storage.backend,
        config.storage.local_root,
        config.mapping.lookup_scope,
    )

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level.lower(),
        access_log=False,
        timeout_graceful_shutdown=config.server.shutdown_timeout,
        timeout_keep_alive=5,
    )


if __name__ == "__main__":
    main()
