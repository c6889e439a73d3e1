"""Similarity search over a vector collection, with a per-collection cache."""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any

from .documents import Document
from .milvus_types import Embedder, LoadState, MetricType, SearchResult, VectorClient, to_float32

log = logging.getLogger(__name__)

DEFAULT_TOP_K = 10
SEARCH_NPROBE = 8192
LOAD_POLL_ATTEMPTS = 60
LOAD_POLL_INTERVAL = 0.5


class RetrieverError(Exception):
    """Raised when a retriever cannot be created or a search fails."""


@dataclass
class MilvusRetrieverConfig:
    """Everything a retriever needs: client, embedder and collection."""

    client: VectorClient | None = None
    embedder: Embedder | None = None
    collection_name: str = ""
    load_poll_attempts: int = LOAD_POLL_ATTEMPTS
    load_poll_interval: float = LOAD_POLL_INTERVAL


class MilvusRetriever:
    """Embeds a query and returns the closest documents of one collection."""

    id_field = "id"
    vector_field = "vector"
    text_field = "content"
    metadata_field = "metadata"

    def __init__(self, config: MilvusRetrieverConfig) -> None:
        if config.client is None:
            raise RetrieverError("milvus client must not be empty")
        if config.embedder is None:
            raise RetrieverError("embedder must not be empty")
        if not config.collection_name:
            raise RetrieverError("collection name must not be empty")

        self.client = config.client
        self.embedder = config.embedder
        self.collection_name = config.collection_name
        self._ensure_loaded(config.load_poll_attempts, config.load_poll_interval)

    def _ensure_loaded(self, attempts: int, interval: float) -> None:
        name = self.collection_name
        try:
            exists = self.client.has_collection(name)
        except Exception as exc:
            raise RetrieverError(f"failed to check whether collection '{name}' exists: {exc}") from exc
        if not exists:
            raise RetrieverError(f"collection '{name}' does not exist")

        try:
            state = self.client.get_load_state(name)
        except Exception as exc:
            raise RetrieverError(f"failed to get load state of collection '{name}': {exc}") from exc
        if state is LoadState.LOADED:
            log.debug("collection '%s' already loaded", name)
            return

        log.info("collection '%s' is in state %s, loading", name, state.value)
        try:
            self.client.load_collection(name, False)
        except Exception as exc:
            raise RetrieverError(f"failed to load collection '{name}': {exc}") from exc

        for _ in range(attempts):
            if interval > 0:
                time.sleep(interval)
            try:
                state = self.client.get_load_state(name)
            except Exception as exc:
                log.error("error while waiting for collection '%s' to load: %s", name, exc)
                break
            if state is LoadState.LOADED:
                log.debug("collection '%s' loaded", name)
                return
        raise RetrieverError(
            f"timed out or failed waiting for collection '{name}' to load, final state: {state.value}"
        )

    def get_relevant_documents(self, query: str, top_k: int | None = None) -> list[Document]:
        """Return up to ``top_k`` documents most similar to ``query``, with scores."""
        if top_k is None:
            top_k = DEFAULT_TOP_K
        try:
            embeddings = self.embedder.embed_strings([query])
        except Exception as exc:
            raise RetrieverError(f"failed to embed query: {exc}") from exc
        if not embeddings:
            raise RetrieverError("failed to embed query: no embedding returned")
        vector = to_float32(embeddings[0])

        try:
            results = self.client.search(
                self.collection_name,
                [self.text_field, self.metadata_field],
                [vector],
                self.vector_field,
                MetricType.COSINE,
                top_k,
                {"nprobe": SEARCH_NPROBE},
            )
        except Exception as exc:
            raise RetrieverError(f"milvus search failed: {exc}") from exc

        documents: list[Document] = []
        for result in results:
            documents.extend(self._documents_from(result))
        return documents

    def _documents_from(self, result: SearchResult) -> list[Document]:
        contents = result.fields.get(self.text_field)
        metadatas = result.fields.get(self.metadata_field)
        if contents is None or metadatas is None:
            raise RetrieverError("search result is missing the 'content' or 'metadata' field")

        documents = []
        for i in range(result.result_count):
            doc_id = result.ids[i]
            if not isinstance(doc_id, str):
                log.error("id of result %d is not a string (got %s)", i, type(doc_id).__name__)
                continue
            content = _at(contents, i)
            if not isinstance(content, str):
                log.error("content of %s is not a string (got %s)", doc_id, type(content).__name__)
                continue
            raw = _at(metadatas, i)
            if not isinstance(raw, (bytes, bytearray)):
                log.error("metadata of %s is not bytes (got %s)", doc_id, type(raw).__name__)
                continue
            try:
                parsed = json.loads(bytes(raw))
            except ValueError:
                parsed = None
            metadata = parsed if isinstance(parsed, dict) else {}
            documents.append(
                Document(id=doc_id, content=content, metadata=metadata, score=float(result.scores[i]))
            )
        return documents


def _at(column: list[Any], index: int) -> Any:
    return column[index] if index < len(column) else None


class RetrieverManager:
    """Shares one client and default embedder, caching a retriever per collection."""

    def __init__(self, client: VectorClient, embedder: Embedder) -> None:
        self.client = client
        self.embedder = embedder
        self._retrievers: dict[str, MilvusRetriever] = {}
        self._lock = threading.Lock()

    def get_retriever(self, collection_name: str, embedder: Embedder | None = None) -> MilvusRetriever:
        """Return a retriever for a collection.

        With a specific ``embedder`` a fresh, uncached retriever is built;
        otherwise the cached one using the default embedder is returned.
        """
        if embedder is not None:
            return MilvusRetriever(
                MilvusRetrieverConfig(client=self.client, embedder=embedder, collection_name=collection_name)
            )

        retriever = self._retrievers.get(collection_name)
        if retriever is not None:
            return retriever
        with self._lock:
            retriever = self._retrievers.get(collection_name)
            if retriever is not None:
                return retriever
            try:
                retriever = MilvusRetriever(
                    MilvusRetrieverConfig(
                        client=self.client, embedder=self.embedder, collection_name=collection_name
                    )
                )
            except RetrieverError as exc:
                raise RetrieverError(
                    f"failed to create default retriever for collection '{collection_name}': {exc}"
                ) from exc
            self._retrievers[collection_name] = retriever
            return retriever


_global_lock = threading.Lock()
_global_initialized = False
_global_manager: RetrieverManager | None = None


def init_global_retriever_manager(client: VectorClient | None, embedder: Embedder | None) -> None:
    """Set up the process-wide manager once; later calls do nothing."""
    global _global_initialized, _global_manager
    with _global_lock:
        if _global_initialized:
            return
        _global_initialized = True
        if client is None or embedder is None:
            raise RetrieverError("failed to init retriever manager: client or embedder is None")
        _global_manager = RetrieverManager(client, embedder)


def get_retriever_manager() -> RetrieverManager | None:
    """The process-wide manager, or None before a successful initialisation."""
    return _global_manager