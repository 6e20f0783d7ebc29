"""Contract tests run against every metadata index backend.

Both backends must answer the same queries the same way: equality
filters ANDed together, insertion order, and idempotent deletes.
"""

import re

import pytest

from s3bridge.config import MetadataConfig
from s3bridge.errors import MetadataIndexError
from s3bridge.metadata import create_metadata_index
from s3bridge.metadata.memory import MemoryMetadataIndex
from s3bridge.metadata.sqlite import SQLiteMetadataIndex

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.000Z$")


@pytest.fixture(params=["memory", "sqlite"])
async def index(request):
    if request.param == "memory":
        idx = MemoryMetadataIndex()
    else:
        idx = SQLiteMetadataIndex(":memory:")
    await idx.init_db()
    yield idx
    await idx.close()


class TestCreate:
    async def test_assigns_id_and_timestamp(self, index):
        record = await index.create("cat.png", "obj1", "photos", 10)
        assert record.id
        assert _ISO_RE.match(record.created_at)
        assert record.filename == "cat.png"
        assert record.object_id == "obj1"
        assert record.bucket_name == "photos"
        assert record.size == 10

    async def test_ids_are_unique(self, index):
        a = await index.create("a", "o1", "b", 1)
        b = await index.create("a", "o2", "b", 1)
        assert a.id != b.id

    async def test_same_filename_allowed_twice(self, index):
        """The index itself does not enforce one mapping per filename."""
        await index.create("dup", "o1", "b", 1)
        await index.create("dup", "o2", "b", 1)
        assert len(await index.query(filename="dup")) == 2


class TestQuery:
    async def test_by_filename_ignores_bucket(self, index):
        await index.create("k", "o1", "b1", 1)
        await index.create("k", "o2", "b2", 1)
        await index.create("other", "o3", "b1", 1)
        records = await index.query(filename="k")
        assert [r.object_id for r in records] == ["o1", "o2"]

    async def test_by_bucket(self, index):
        await index.create("x", "o1", "b1", 1)
        await index.create("y", "o2", "b2", 1)
        await index.create("z", "o3", "b1", 1)
        records = await index.query(bucket_name="b1")
        assert [r.filename for r in records] == ["x", "z"]

    async def test_filters_are_anded(self, index):
        await index.create("k", "o1", "b1", 1)
        await index.create("k", "o2", "b2", 1)
        records = await index.query(filename="k", bucket_name="b2")
        assert [r.object_id for r in records] == ["o2"]

    async def test_no_match_returns_empty(self, index):
        assert await index.query(filename="missing") == []

    async def test_insertion_order(self, index):
        for name in ["c", "a", "b"]:
            await index.create(name, f"o-{name}", "bucket", 1)
        records = await index.query(bucket_name="bucket")
        assert [r.filename for r in records] == ["c", "a", "b"]

    async def test_filename_with_slashes(self, index):
        await index.create("a/b/c.txt", "o1", "b", 3)
        assert (await index.query(filename="a/b/c.txt"))[0].size == 3


class TestDelete:
    async def test_delete_removes_record(self, index):
        record = await index.create("k", "o1", "b", 1)
        await index.delete(record.id)
        assert await index.query(filename="k") == []

    async def test_delete_only_that_record(self, index):
        keep = await index.create("k", "o1", "b", 1)
        drop = await index.create("k", "o2", "b", 1)
        await index.delete(drop.id)
        assert [r.id for r in await index.query(filename="k")] == [keep.id]

    async def test_delete_unknown_is_noop(self, index):
        await index.delete("does-not-exist")


class TestPing:
    async def test_ping(self, index):
        await index.ping()


class TestSQLiteSpecific:
    async def test_persists_across_reopen(self, tmp_path):
        path = str(tmp_path / "nested" / "meta.db")
        idx = SQLiteMetadataIndex(path)
        await idx.init_db()
        await idx.create("k", "o1", "b", 4)
        await idx.close()

        reopened = SQLiteMetadataIndex(path)
        await reopened.init_db()
        records = await reopened.query(filename="k")
        await reopened.close()
        assert [r.object_id for r in records] == ["o1"]

    async def test_use_before_init_raises(self):
        idx = SQLiteMetadataIndex(":memory:")
        with pytest.raises(MetadataIndexError):
            await idx.query(filename="k")

    async def test_use_after_close_raises(self):
        idx = SQLiteMetadataIndex(":memory:")
        await idx.init_db()
        await idx.close()
        with pytest.raises(MetadataIndexError):
            await idx.ping()


class TestFactory:
    def test_sqlite(self):
        idx = create_metadata_index(MetadataConfig(engine="sqlite", sqlite_path=":memory:"))
        assert isinstance(idx, SQLiteMetadataIndex)

    def test_memory(self):
        assert isinstance(create_metadata_index(MetadataConfig(engine="memory")), MemoryMetadataIndex)

    def test_unknown_engine(self):
        with pytest.raises(ValueError, match="Unknown metadata engine"):
            create_metadata_index(MetadataConfig(engine="postgres"))
