"""Configuration loading and Pydantic models for s3bridge."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server binding and runtime configuration."""

    host: str = "0.0.0.0"
    port: int = 9000
    log_level: str = "INFO"
    log_format: str = "text"
    shutdown_timeout: int = 30


class MetadataConfig(BaseModel):
    """Metadata index configuration."""

    engine: str = "sqlite"
    sqlite_path: str = "./data/metadata.db"


class StorageConfig(BaseModel):
    """Object store backend configuration."""

    backend: str = "local"
    local_root: str = "./data/objects"
    memory_max_size_bytes: int = 0


class MappingConfig(BaseModel):
    """Filename-to-object mapping behaviour.

    ``lookup_scope`` controls how uploads and downloads find existing
    mappings: ``global`` matches on filename alone, ``bucket`` also
    requires the bucket label to match. Deletes always match both.
    """

    lookup_scope: Literal["global", "bucket"] = "global"
    cache_control: str = "public, max-age=3600"


class ObservabilityConfig(BaseModel):
    """Metrics and health check toggles."""

    metrics: bool = True
    health_check: bool = True


class S3BridgeConfig(BaseModel):
    """Top-level s3bridge configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    mapping: MappingConfig = Field(default_factory=MappingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


def _parse_server(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the server section from YAML data into a dict for Pydantic."""
    if data is None:
        return {}
    return {
        "host": data.get("host", "0.0.0.0"),
        "port": data.get("port", 9000),
        "log_level": data.get("log_level", "INFO"),
        "log_format": data.get("log_format", "text"),
        "shutdown_timeout": data.get("shutdown_timeout", 30),
    }


def _parse_metadata(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the metadata section from YAML data.

    Handles nested structure: metadata.sqlite.path -> sqlite_path
    """
    if data is None:
        return {}
    result: dict[str, Any] = {"engine": data.get("engine", "sqlite")}
    sqlite_section = data.get("sqlite")
    if isinstance(sqlite_section, dict):
        result["sqlite_path"] = sqlite_section.get("path", "./data/metadata.db")
    return result


def _parse_storage(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the storage section from YAML data.

    Handles nested structure: storage.local.root_dir -> local_root,
    storage.memory.max_size_bytes -> memory_max_size_bytes.
    """
    if data is None:
        return {}

    result: dict[str, Any] = {"backend": data.get("backend", "local")}

    local_section = data.get("local")
    if isinstance(local_section, dict):
        result["local_root"] = local_section.get("root_dir", "./data/objects")

    memory_section = data.get("memory")
    if isinstance(memory_section, dict):
        result["memory_max_size_bytes"] = memory_section.get("max_size_bytes", 0)

    return result


def _parse_mapping(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the mapping section from YAML data."""
    if data is None:
        return {}
    return {
        "lookup_scope": data.get("lookup_scope", "global"),
        "cache_control": data.get("cache_control", "public, max-age=3600"),
    }


def _parse_observability(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the observability section from YAML data."""
    if data is None:
        return {}
    return {
        "metrics": data.get("metrics", True),
        "health_check": data.get("health_check", True),
    }


def load_config(path: Path) -> S3BridgeConfig:
    """Load an S3BridgeConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated S3BridgeConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value has the wrong type or is not
            an allowed choice.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return S3BridgeConfig(
        server=ServerConfig(**_parse_server(raw.get("server"))),
        metadata=MetadataConfig(**_parse_metadata(raw.get("metadata"))),
        storage=StorageConfig(**_parse_storage(raw.get("storage"))),
        mapping=MappingConfig(**_parse_mapping(raw.get("mapping"))),
        observability=ObservabilityConfig(**_parse_observability(raw.get("observability"))),
    )
