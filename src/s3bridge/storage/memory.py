"""In-memory object store for s3bridge.

Useful for testing and ephemeral deployments. Data is lost on restart.
"""

import logging
import uuid

from s3bridge.errors import ObjectNotFoundError, ObjectStoreError

logger = logging.getLogger(__name__)


class MemoryCapacityError(ObjectStoreError):
    """Raised when a put would exceed the configured max_size_bytes."""


class MemoryObjectStore:
    """Object store that holds all objects in a dictionary.

    Attributes:
        max_size_bytes: Maximum total bytes allowed (0 = unlimited).
    """

    def __init__(self, max_size_bytes: int = 0) -> None:
        """Initialize the memory object store.

        Args:
            max_size_bytes: Maximum total bytes of object data to hold in
                memory. 0 means unlimited.
        """
        self.max_size_bytes = max_size_bytes
        self._objects: dict[str, bytes] = {}
        self._current_size: int = 0

    async def init(self) -> None:
        logger.info(
            "Memory object store initialized (max_size_bytes=%d)", self.max_size_bytes
        )

    async def close(self) -> None:
        self._objects.clear()
        self._current_size = 0

    async def ping(self) -> None:
        pass

    async def put(self, data: bytes) -> str:
        """Store bytes under a fresh object id.

        Raises:
            MemoryCapacityError: If the store would exceed max_size_bytes.
        """
        if self.max_size_bytes and self._current_size + len(data) > self.max_size_bytes:
            raise MemoryCapacityError(
                f"Memory limit exceeded: {self._current_size + len(data)} > "
                f"{self.max_size_bytes} bytes"
            )
        object_id = uuid.uuid4().hex
        self._objects[object_id] = bytes(data)
        self._current_size += len(data)
        return object_id

    async def get(self, object_id: str) -> bytes:
        try:
            return self._objects[object_id]
        except KeyError:
            raise ObjectNotFoundError(object_id) from None

    async def delete(self, object_id: str) -> None:
        data = self._objects.pop(object_id, None)
        if data is not None:
            self._current_size -= len(data)
