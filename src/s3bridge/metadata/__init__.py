"""Metadata index backends for s3bridge."""

from typing import TYPE_CHECKING

from s3bridge.metadata.models import FileMapping
from s3bridge.metadata.store import MetadataIndex

if TYPE_CHECKING:
    from s3bridge.config import MetadataConfig

__all__ = [
    "create_metadata_index",
    "FileMapping",
    "MetadataIndex",
]


def create_metadata_index(config: "MetadataConfig") -> MetadataIndex:
    """Create a metadata index instance based on configuration.

    Args:
        config: The metadata configuration.

    Returns:
        A metadata index implementing the MetadataIndex protocol.

    Raises:
        ValueError: If the engine is unknown.
    """
    engine = config.engine

    if engine == "sqlite":
        from s3bridge.metadata.sqlite import SQLiteMetadataIndex

        return SQLiteMetadataIndex(config.sqlite_path)

    elif engine == "memory":
        from s3bridge.metadata.memory import MemoryMetadataIndex

        return MemoryMetadataIndex()

    else:
        raise ValueError(f"Unknown metadata engine: {engine}")
