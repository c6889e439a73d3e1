"""Vector store operations for datasets, retried on failure."""

import logging
import time
from typing import Callable, Sequence, TypeVar

from .documents import Document
from .indexer_pool import IndexerManager, get_indexer
from .milvus_indexer import Indexer

log = logging.getLogger(__name__)

DEFAULT_RETRY_TIMES = 5
DEFAULT_INTERVAL = 3.0

_T = TypeVar("_T")


def _retry(op: Callable[[], _T], retry_times: int, interval: float, prefix: str) -> _T:
    if retry_times < 1:
        raise ValueError("retry_times must be at least 1")
    for attempt in range(1, retry_times + 1):
        try:
            return op()
        except Exception as exc:
            log.warning("%s attempt %d/%d failed: %s", prefix, attempt, retry_times, exc)
            if attempt == retry_times:
                raise
            if interval > 0:
                time.sleep(interval)
    raise AssertionError("unreachable")


def _indexer_for(manager: IndexerManager | None, collection_name: str) -> Indexer:
    resolved = manager if manager is not None else get_indexer()
    if resolved is None:
        raise RuntimeError("indexer is nil")
    indexer = resolved.get_or_init_indexer(collection_name)
    if indexer is None:
        raise RuntimeError("indexer is nil")
    return indexer


def delete_milvus_vectors(
    collection_name: str,
    embedding_ids: Sequence[str],
    *,
    manager: IndexerManager | None = None,
    retry_times: int = DEFAULT_RETRY_TIMES,
    interval: float = DEFAULT_INTERVAL,
) -> None:
    """Delete vectors by id from a collection."""

    def op() -> None:
        _indexer_for(manager, collection_name).delete(embedding_ids)

    _retry(op, retry_times, interval, f"Milvus.DeleteVectors.{collection_name}")


def store_milvus_vectors(
    collection_name: str,
    docs: Sequence[Document],
    *,
    manager: IndexerManager | None = None,
    retry_times: int = DEFAULT_RETRY_TIMES,
    interval: float = DEFAULT_INTERVAL,
) -> list[str]:
    """Embed and store documents in a collection; return the stored ids."""

    def op() -> list[str]:
        return _indexer_for(manager, collection_name).store(docs)

    return _retry(op, retry_times, interval, f"Milvus.StoreVectors.{collection_name}")


def delete_milvus_collection(
    collection_name: str,
    *,
    manager: IndexerManager | None = None,
    retry_times: int = DEFAULT_RETRY_TIMES,
    interval: float = DEFAULT_INTERVAL,
) -> None:
    """Drop a whole collection."""
    if not collection_name:
        raise ValueError("collection name is empty")

    def op() -> None:
        _indexer_for(manager, collection_name).delete_collection(collection_name)

    _retry(op, retry_times, interval, f"Milvus.DeleteCollection.{collection_name}")