"""In-memory metadata index for s3bridge.

Useful for testing and ephemeral deployments. Data is lost on restart.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from s3bridge.metadata.models import FileMapping


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


class MemoryMetadataIndex:
    """In-memory metadata index backed by an insertion-ordered dict.

    No persistence - all data is lost on restart. Suitable for testing
    or short-lived ephemeral deployments.
    """

    def __init__(self) -> None:
        self._records: dict[str, FileMapping] = {}

    async def init_db(self) -> None:
        pass

    async def close(self) -> None:
        self._records.clear()

    async def ping(self) -> None:
        pass

    async def query(
        self,
        filename: str | None = None,
        bucket_name: str | None = None,
    ) -> list[FileMapping]:
        results = []
        for record in self._records.values():
            if filename is not None and record.filename != filename:
                continue
            if bucket_name is not None and record.bucket_name != bucket_name:
                continue
            # Hand out copies so callers cannot mutate stored records
            results.append(replace(record))
        return results

    async def create(
        self,
        filename: str,
        object_id: str,
        bucket_name: str,
        size: int,
    ) -> FileMapping:
        record = FileMapping(
            id=uuid.uuid4().hex,
            filename=filename,
            object_id=object_id,
            bucket_name=bucket_name,
            size=size,
            created_at=_now_iso(),
        )
        self._records[record.id] = record
        return replace(record)

    async def delete(self, record_id: str) -> None:
        self._records.pop(record_id, None)
