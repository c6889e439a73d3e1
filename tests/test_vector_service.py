import pytest

from ragadmin.documents import Document
from ragadmin.indexer_pool import IndexerManager
from ragadmin.milvus_indexer import IndexerError
from ragadmin.milvus_types import CollectionInfo
from ragadmin.vector_service import (
    delete_milvus_collection,
    delete_milvus_vectors,
    store_milvus_vectors,
)


class FakeClient:
    def __init__(self, delete_failures=0):
        self.collections = {}
        self.inserted = []
        self.deleted_exprs = []
        self.dropped = []
        self.delete_failures = delete_failures
        self.delete_calls = 0

    def has_collection(self, name):
        return name in self.collections

    def create_collection(self, schema, shards_num, *, consistency_level, enable_dynamic_schema, partition_num):
        self.collections[schema.name] = schema

    def describe_collection(self, name):
        return CollectionInfo(schema=self.collections[name], loaded=True)

    def insert_rows(self, collection, partition, rows):
        self.inserted.extend(rows)
        return [row.id for row in rows]

    def flush(self, collection, async_):
        pass

    def delete(self, collection, partition, expr):
        self.delete_calls += 1
        if self.delete_failures:
            self.delete_failures -= 1
            raise RuntimeError("delete refused")
        self.deleted_exprs.append(expr)

    def drop_collection(self, name):
        self.dropped.append(name)
        self.collections.pop(name, None)


class FakeEmbedder:
    def embed_strings(self, texts):
        return [[1.0, 0.0] for _ in texts]


class FailingEmbedder:
    def __init__(self):
        self.calls = 0

    def embed_strings(self, texts):
        self.calls += 1
        raise RuntimeError("model down")


def make_manager(client, embedder=None):
    return IndexerManager(client, embedder or FakeEmbedder())


def test_store_returns_ids():
    client = FakeClient()
    docs = [Document(id="a", content="x"), Document(id="b", content="y")]
    ids = store_milvus_vectors("c1", docs, manager=make_manager(client), interval=0)
    assert ids == ["a", "b"]
    assert [row.id for row in client.inserted] == ["a", "b"]


def test_store_retries_then_raises():
    client = FakeClient()
    embedder = FailingEmbedder()
    docs = [Document(id="a", content="x")]
    with pytest.raises(IndexerError, match="embedding failed"):
        store_milvus_vectors("c1", docs, manager=make_manager(client, embedder), retry_times=3, interval=0)
    assert embedder.calls == 3


def test_delete_builds_expression():
    client = FakeClient()
    delete_milvus_vectors("c1", ["a", "b"], manager=make_manager(client), interval=0)
    assert client.deleted_exprs == ['id in ["a","b"]']


def test_delete_empty_ids_does_nothing():
    client = FakeClient()
    delete_milvus_vectors("c1", [], manager=make_manager(client), interval=0)
    assert client.delete_calls == 0


def test_delete_retries_until_success():
    client = FakeClient(delete_failures=2)
    delete_milvus_vectors("c1", ["a"], manager=make_manager(client), retry_times=5, interval=0)
    assert client.delete_calls == 3
    assert client.deleted_exprs == ['id in ["a"]']


def test_delete_gives_up_after_retry_times():
    client = FakeClient(delete_failures=10)
    with pytest.raises(IndexerError, match="milvus delete failed"):
        delete_milvus_vectors("c1", ["a"], manager=make_manager(client), retry_times=2, interval=0)
    assert client.delete_calls == 2


def test_delete_collection_drops():
    client = FakeClient()
    delete_milvus_collection("c9", manager=make_manager(client), interval=0)
    assert client.dropped == ["c9"]
    assert "c9" not in client.collections


def test_delete_collection_rejects_empty_name():
    with pytest.raises(ValueError, match="collection name is empty"):
        delete_milvus_collection("", manager=make_manager(FakeClient()), interval=0)


def test_retry_times_must_be_positive():
    with pytest.raises(ValueError):
        delete_milvus_vectors("c1", ["a"], manager=make_manager(FakeClient()), retry_times=0, interval=0)