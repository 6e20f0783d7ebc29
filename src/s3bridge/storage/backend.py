"""Abstract object store protocol for s3bridge."""

from typing import Protocol


class ObjectStore(Protocol):
    """Protocol defining the object store interface.

    The object store keeps raw bytes under opaque object ids that it
    issues itself. It knows nothing about buckets or filenames; that
    mapping lives in the metadata index.
    """

    async def init(self) -> None:
        """Initialize the store (create directories, connect, etc.)."""
        ...

    async def close(self) -> None:
        """Release resources held by the store."""
        ...

    async def ping(self) -> None:
        """Probe the store, raising if it cannot serve requests."""
        ...

    async def put(self, data: bytes) -> str:
        """Store bytes as a new object.

        Args:
            data: The raw bytes to store. May be empty.

        Returns:
            The freshly issued object id.
        """
        ...

    async def get(self, object_id: str) -> bytes:
        """Retrieve an object's bytes.

        Args:
            object_id: The id returned by ``put``.

        Returns:
            The raw bytes of the object.

        Raises:
            ObjectNotFoundError: If no object has this id.
        """
        ...

    async def delete(self, object_id: str) -> None:
        """Delete an object. Deleting an unknown id is a no-op.

        Args:
            object_id: The id returned by ``put``.
        """
        ...
