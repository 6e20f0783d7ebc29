"""Object-level request handlers for s3bridge.

Implements the three keyed operations:
    - PutObject (PUT /{bucket}/{key})
    - GetObject (GET /{bucket}/{key})
    - DeleteObject (DELETE /{bucket}/{key})

Every operation spans two independently failing backends, the object store
and the metadata index. There is no transaction across them; each operation
is an ordered sequence of awaited steps and the first failure aborts it.
"""

import logging
import urllib.parse

from fastapi import FastAPI, Request, Response

from s3bridge.errors import NoSuchKey, NoSuchMapping
from s3bridge.metadata.models import FileMapping
from s3bridge.mime import guess_content_type

logger = logging.getLogger(__name__)


def _content_disposition(key: str) -> str:
    """Build an attachment Content-Disposition header for a key.

    Keys that cannot be sent as a latin-1 header value use the RFC 6266
    ``filename*`` form instead.
    """
    try:
        key.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=UTF-8''{urllib.parse.quote(key, safe='')}"
    return f'attachment; filename="{key}"'


class ObjectHandler:
    """Handles keyed object operations.

    Attributes:
        app: The parent FastAPI application.
    """

    def __init__(self, app: FastAPI) -> None:
        """Initialize the object handler.

        Args:
            app: The FastAPI application instance.
        """
        self.app = app

    @property
    def metadata(self):
        """Shortcut to the metadata index on app.state."""
        return self.app.state.metadata

    @property
    def storage(self):
        """Shortcut to the object store on app.state."""
        return self.app.state.storage

    @property
    def config(self):
        """Shortcut to the S3BridgeConfig on app.state."""
        return self.app.state.config

    async def _find_mappings(self, bucket: str, key: str) -> list[FileMapping]:
        """Look up the mappings an upload or download applies to.

        With the default ``global`` lookup scope the bucket is ignored and
        any mapping for ``key`` matches, whichever bucket it was uploaded
        under. With ``bucket`` scope the bucket label must match too.
        """
        if self.config.mapping.lookup_scope == "bucket":
            return await self.metadata.query(filename=key, bucket_name=bucket)
        return await self.metadata.query(filename=key)

    async def _remove(self, mapping: FileMapping) -> None:
        """Delete a mapping's object, then the mapping itself.

        Storage goes first: if it fails the mapping survives and still
        points at the object.
        """
        await self.storage.delete(mapping.object_id)
        await self.metadata.delete(mapping.id)

    async def put_object(self, request: Request, bucket: str, key: str) -> Response:
        """Upload an object, replacing any earlier upload of the same key.

        Implements: PUT /{bucket}/{key}

        Existing mappings for the key are removed (object first, then
        record) before the new bytes are stored and a fresh mapping is
        created. A failure at any step aborts the upload; mappings already
        removed stay removed.

        Args:
            request: The incoming HTTP request.
            bucket: The bucket name from the URL path.
            key: The object key from the URL path.

        Returns:
            200 OK with body ``OK: {object_id}``.
        """
        data = await request.body()

        existing = await self._find_mappings(bucket, key)
        for mapping in existing:
            logger.debug(
                "Replacing mapping %s (object %s) for %s",
                mapping.id,
                mapping.object_id,
                key,
            )
            await self._remove(mapping)

        object_id = await self.storage.put(data)
        await self.metadata.create(
            filename=key,
            object_id=object_id,
            bucket_name=bucket,
            size=len(data),
        )

        logger.info(
            "Stored %s/%s as object %s (%d bytes, replaced %d)",
            bucket,
            key,
            object_id,
            len(data),
            len(existing),
            extra={"bucket": bucket, "key": key, "object_id": object_id},
        )
        return Response(
            content=f"OK: {object_id}",
            status_code=200,
            media_type="text/plain",
        )

    async def get_object(self, request: Request, bucket: str, key: str) -> Response:
        """Download the object currently mapped to a key.

        Implements: GET /{bucket}/{key}

        Args:
            request: The incoming HTTP request.
            bucket: The bucket name from the URL path.
            key: The object key from the URL path.

        Returns:
            200 with the raw bytes and download headers.

        Raises:
            NoSuchKey: If no mapping exists for the key.
        """
        mappings = await self._find_mappings(bucket, key)
        if not mappings:
            raise NoSuchKey()

        mapping = mappings[0]
        data = await self.storage.get(mapping.object_id)
        logger.debug("Sending %s (%d bytes) from object %s", key, len(data), mapping.object_id)

        headers = {
            "Content-Type": guess_content_type(key),
            "Content-Length": str(len(data)),
            "Content-Transfer-Encoding": "binary",
            "Content-Disposition": _content_disposition(key),
            "Cache-Control": self.config.mapping.cache_control,
        }
        return Response(content=data, status_code=200, headers=headers)

    async def delete_object(self, request: Request, bucket: str, key: str) -> Response:
        """Delete the object mapped to a key within a bucket.

        Implements: DELETE /{bucket}/{key}

        The lookup always matches both filename and bucket label, whatever
        the configured lookup scope. The object is deleted before its
        mapping, so a storage failure leaves the mapping in place.

        Args:
            request: The incoming HTTP request.
            bucket: The bucket name from the URL path.
            key: The object key from the URL path.

        Returns:
            204 No Content on success.

        Raises:
            NoSuchMapping: If no mapping exists for the bucket and key.
        """
        mappings = await self.metadata.query(filename=key, bucket_name=bucket)
        if not mappings:
            raise NoSuchMapping()

        mapping = mappings[0]
        await self._remove(mapping)

        logger.info(
            "Deleted %s/%s (object %s)",
            bucket,
            key,
            mapping.object_id,
            extra={"bucket": bucket, "key": key, "object_id": mapping.object_id},
        )
        return Response(status_code=204)
