"""Per-collection indexer cache sharing one vector client and embedder."""

import threading

from .faq_schema import build_milvus_faq_schema
from .milvus_indexer import Indexer, IndexerConfig, IndexerError, new_indexer
from .milvus_types import Embedder, MetricType, VectorClient


def build_faq_indexer_config(
    client: VectorClient, embedder: Embedder, collection_name: str
) -> IndexerConfig:
    """Indexer settings for an FAQ collection."""
    return IndexerConfig(
        client=client,
        collection=collection_name,
        description="RAG dataset collection",
        fields=build_milvus_faq_schema(),
        embedding=embedder,
        metric_type=MetricType.COSINE,
        shared_num=1,
        partition_num=0,
        enable_dynamic_schema=False,
    )


def init_milvus_indexer(
    client: VectorClient | None, embedder: Embedder | None, collection_name: str
) -> Indexer:
    """Create an indexer for an FAQ collection, creating the collection if needed."""
    if client is None:
        raise IndexerError("milvus client not provided")
    if embedder is None:
        raise IndexerError("embedding model not provided")
    return new_indexer(build_faq_indexer_config(client, embedder, collection_name))


class IndexerManager:
    """Creates indexers on demand and keeps one per collection."""

    def __init__(self, client: VectorClient, embedder: Embedder) -> None:
        self.client = client
        self.embedder = embedder
        self._indexers: dict[str, Indexer] = {}
        self._lock = threading.Lock()

    def get_or_init_indexer(self, collection_name: str) -> Indexer:
        """Return the cached indexer for a collection, creating it on first use."""
        indexer = self._indexers.get(collection_name)
        if indexer is not None:
            return indexer
        with self._lock:
            indexer = self._indexers.get(collection_name)
            if indexer is None:
                indexer = init_milvus_indexer(self.client, self.embedder, collection_name)
                self._indexers[collection_name] = indexer
            return indexer


_global_lock = threading.Lock()
_global_manager: IndexerManager | None = None


def init_global_indexer(client: VectorClient, embedder: Embedder) -> None:
    """Set up the process-wide manager; later calls leave it unchanged."""
    global _global_manager
    with _global_lock:
        if _global_manager is None:
            _global_manager = IndexerManager(client, embedder)


def get_indexer() -> IndexerManager | None:
    """The process-wide manager, or None before initialisation."""
    return _global_manager