"""Abstract metadata index protocol for s3bridge."""

from typing import Protocol

from s3bridge.metadata.models import FileMapping


class MetadataIndex(Protocol):
    """Protocol defining the metadata index interface.

    The index is a document store of ``FileMapping`` records. It assigns
    record ids and creation timestamps, and answers equality queries on
    ``filename`` and ``bucket_name``.
    """

    async def init_db(self) -> None:
        """Open the index and create its schema if needed.

        Must be idempotent (safe to call on every startup).
        """
        ...

    async def close(self) -> None:
        """Close the index and release resources."""
        ...

    async def ping(self) -> None:
        """Probe the index, raising if it cannot serve requests."""
        ...

    async def query(
        self,
        filename: str | None = None,
        bucket_name: str | None = None,
    ) -> list[FileMapping]:
        """Return the records matching every given filter.

        Filters left as None are not applied. Records come back in
        insertion order.

        Args:
            filename: Match records with exactly this filename.
            bucket_name: Match records with exactly this bucket label.

        Returns:
            The matching records, possibly empty.
        """
        ...

    async def create(
        self,
        filename: str,
        object_id: str,
        bucket_name: str,
        size: int,
    ) -> FileMapping:
        """Create a new record.

        Args:
            filename: The logical key.
            object_id: The object store id holding the bytes.
            bucket_name: The bucket label.
            size: Byte length of the stored object.

        Returns:
            The created record, with ``id`` and ``created_at`` assigned.
        """
        ...

    async def delete(self, record_id: str) -> None:
        """Delete a record. Deleting an unknown id is a no-op.

        Args:
            record_id: The ``id`` of the record to delete.
        """
        ...
