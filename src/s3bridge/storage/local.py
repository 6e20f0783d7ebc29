"""Local filesystem object store for s3bridge.

Implements the ObjectStore protocol using the local filesystem. Objects
are stored under ``{root}/{object_id[:2]}/{object_id}`` so that no single
directory grows without bound.

Crash-only design:
    - Atomic writes via temp-fsync-rename pattern.
    - Never acknowledge before data is fsync'd to disk.
    - Startup cleans orphan temp files left by interrupted writes.
"""

import logging
import os
import re
import uuid
from pathlib import Path

from s3bridge.errors import ObjectNotFoundError, ObjectStoreError

logger = logging.getLogger(__name__)

_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


class LocalObjectStore:
    """Object store that persists objects on the local filesystem.

    Attributes:
        root: The root directory for all stored objects.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize the local object store.

        Args:
            root: Root directory path for object storage.
        """
        self.root = Path(root)

    def _object_path(self, object_id: str) -> Path:
        """Return the filesystem path for a stored object.

        Args:
            object_id: The object id.

        Returns:
            The path where this object is stored.

        Raises:
            ObjectNotFoundError: If the id is not one this store could
                have issued.
        """
        if not _OBJECT_ID_RE.match(object_id):
            raise ObjectNotFoundError(object_id)
        return self.root / object_id[:2] / object_id

    async def init(self) -> None:
        """Create the root directory and clean up orphan temp files.

        Crash-only design: every startup is a recovery. Remove any
        leftover ``.tmp.*`` files from interrupted writes.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        self._clean_temp_files()
        logger.info("Local object store initialized at %s", self.root)

    def _clean_temp_files(self) -> None:
        """Remove orphan temp files left by interrupted atomic writes."""
        count = 0
        for dirpath, _dirnames, filenames in os.walk(self.root):
            for fname in filenames:
                if ".tmp." in fname:
                    try:
                        os.unlink(os.path.join(dirpath, fname))
                        count += 1
                    except OSError:
                        logger.warning("Could not remove temp file %s", fname)
        if count > 0:
            logger.info("Cleaned %d orphan temp files on startup", count)

    async def close(self) -> None:
        """No-op for the local filesystem store."""

    async def ping(self) -> None:
        """Raise if the root directory is missing."""
        if not self.root.is_dir():
            raise ObjectStoreError(f"Data directory not found: {self.root}")

    async def put(self, data: bytes) -> str:
        """Store bytes on the local filesystem under a fresh object id.

        Uses the atomic temp-fsync-rename pattern for crash safety.

        Args:
            data: The raw bytes to store.

        Returns:
            The new object id.
        """
        object_id = uuid.uuid4().hex
        path = self._object_path(object_id)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp = path.with_name(f"{path.name}.tmp.{uuid.uuid4().hex[:8]}")
        try:
            fd = os.open(str(tmp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
            try:
                os.write(fd, data)
                os.fsync(fd)
            finally:
                os.close(fd)
            tmp.rename(path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise ObjectStoreError(f"Failed to write object {object_id}: {exc}") from exc

        return object_id

    async def get(self, object_id: str) -> bytes:
        """Read an object's bytes from disk.

        Raises:
            ObjectNotFoundError: If the object does not exist on disk.
        """
        path = self._object_path(object_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise ObjectNotFoundError(object_id) from None

    async def delete(self, object_id: str) -> None:
        """Delete an object from disk.

        Silently ignores missing files (idempotent) and removes the shard
        directory once it is empty.
        """
        try:
            path = self._object_path(object_id)
        except ObjectNotFoundError:
            return

        try:
            path.unlink()
        except FileNotFoundError:
            return

        try:
            path.parent.rmdir()  # Only removes empty dirs
        except OSError:
            pass
