"""SQLite-backed metadata index for s3bridge.

Implements the MetadataIndex protocol using aiosqlite for async access.
All tables use CREATE TABLE IF NOT EXISTS for schema idempotency.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from s3bridge.errors import MetadataIndexError
from s3bridge.metadata.models import FileMapping

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _row_to_mapping(row: aiosqlite.Row) -> FileMapping:
    return FileMapping(
        id=row["id"],
        filename=row["filename"],
        object_id=row["object_id"],
        bucket_name=row["bucket_name"],
        size=row["size"],
        created_at=row["created_at"],
    )


class SQLiteMetadataIndex:
    """Metadata index backed by a local SQLite database.

    Records live in a single ``file_mappings`` table. ``filename`` carries
    no uniqueness constraint; the upload handler keeps one mapping per
    filename.

    Attributes:
        db_path: Path to the SQLite database file.
        _db: The aiosqlite connection, set after init_db().
    """

    def __init__(self, db_path: str) -> None:
        """Initialize the SQLite metadata index.

        Args:
            db_path: Filesystem path to the SQLite database file.
                     Use ':memory:' for an in-memory database (useful in tests).
        """
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """The open connection.

        Raises:
            MetadataIndexError: If init_db() has not run or close() has.
        """
        if self._db is None:
            raise MetadataIndexError("Metadata index is not open")
        return self._db

    async def init_db(self) -> None:
        """Open the database and create tables if they do not exist.

        Sets WAL journal mode, NORMAL synchronous, and a 5-second busy
        timeout. Idempotent -- safe to call on every startup.
        """
        if self._db is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row

        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute("PRAGMA synchronous = NORMAL")
        await self._db.execute("PRAGMA busy_timeout = 5000")

        await self._create_tables()
        logger.info("SQLite metadata index opened at %s", self.db_path)

    async def _create_tables(self) -> None:
        """Create the mapping table and its indexes if they do not exist."""
        await self.db.executescript("""
            CREATE TABLE IF NOT EXISTS file_mappings (
                seq          INTEGER PRIMARY KEY AUTOINCREMENT,
                id           TEXT NOT NULL UNIQUE,
                filename     TEXT NOT NULL,
                object_id    TEXT NOT NULL,
                bucket_name  TEXT NOT NULL,
                size         INTEGER NOT NULL DEFAULT 0,
                created_at   TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_mappings_filename
                ON file_mappings(filename);
            CREATE INDEX IF NOT EXISTS idx_mappings_bucket
                ON file_mappings(bucket_name);
        """)
        await self.db.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def ping(self) -> None:
        """Run ``SELECT 1`` against the connection."""
        async with self.db.execute("SELECT 1") as cursor:
            await cursor.fetchone()

    async def query(
        self,
        filename: str | None = None,
        bucket_name: str | None = None,
    ) -> list[FileMapping]:
        """Return records matching every given filter, in insertion order.

        Args:
            filename: Match records with exactly this filename.
            bucket_name: Match records with exactly this bucket label.

        Returns:
            The matching records.
        """
        clauses: list[str] = []
        params: list[str] = []
        if filename is not None:
            clauses.append("filename = ?")
            params.append(filename)
        if bucket_name is not None:
            clauses.append("bucket_name = ?")
            params.append(bucket_name)

        sql = "SELECT id, filename, object_id, bucket_name, size, created_at FROM file_mappings"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY seq"

        async with self.db.execute(sql, params) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_mapping(row) for row in rows]

    async def create(
        self,
        filename: str,
        object_id: str,
        bucket_name: str,
        size: int,
    ) -> FileMapping:
        """Insert a new record and return it with its id and timestamp.

        Args:
            filename: The logical key.
            object_id: The object store id holding the bytes.
            bucket_name: The bucket label.
            size: Byte length of the stored object.

        Returns:
            The created record.
        """
        record = FileMapping(
            id=uuid.uuid4().hex,
            filename=filename,
            object_id=object_id,
            bucket_name=bucket_name,
            size=size,
            created_at=_now_iso(),
        )
        await self.db.execute(
            "INSERT INTO file_mappings "
            "(id, filename, object_id, bucket_name, size, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                record.id,
                record.filename,
                record.object_id,
                record.bucket_name,
                record.size,
                record.created_at,
            ),
        )
        await self.db.commit()
        return record

    async def delete(self, record_id: str) -> None:
        """Delete a record by id. Unknown ids are ignored.

        Args:
            record_id: The ``id`` of the record to delete.
        """
        await self.db.execute("DELETE FROM file_mappings WHERE id = ?", (record_id,))
        await self.db.commit()
