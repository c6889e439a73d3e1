"""Indexer that embeds documents and stores them in a vector collection."""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from .documents import Document
from .milvus_types import (
    DEFAULT_COLLECTION,
    DEFAULT_CONSISTENCY_LEVEL,
    DEFAULT_DESCRIPTION,
    DEFAULT_INDEX_FIELD,
    DEFAULT_METRIC_TYPE,
    TYPE_NAME,
    ConsistencyLevel,
    DefaultRow,
    Embedder,
    Field,
    LoadState,
    MetricType,
    Schema,
    VectorClient,
    to_float32,
)

log = logging.getLogger(__name__)

BATCH_SIZE = 20
MAX_ERROR_LENGTH = 2000
LOADING_POLL_INTERVAL = 0.2

DocumentConverter = Callable[[Sequence[Document], Sequence[Sequence[float]]], list[Any]]


class IndexerError(Exception):
    """Raised when the indexer cannot be set up or an operation fails.

    ``ids`` holds the ids that were stored before the failure, if any.
    """

    def __init__(self, message: str, ids: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.ids = list(ids)


def _default_document_converter(
    docs: Sequence[Document], vectors: Sequence[Sequence[float]]
) -> list[Any]:
    rows = []
    encoded = []
    for doc in docs:
        try:
            metadata = json.dumps(doc.metadata, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise IndexerError(f"failed to marshal metadata: {exc}") from exc
        encoded.append(DefaultRow(id=doc.id, content=doc.content, vector=[], metadata=metadata))
    for row, vector in zip(encoded, vectors):
        row.vector = to_float32(vector)
        rows.append(row)
    return rows


@dataclass
class IndexerConfig:
    """Settings for an indexer; ``check`` fills in defaults for unset values."""

    client: VectorClient | None = None
    embedding: Embedder | None = None
    collection: str = ""
    description: str = ""
    partition_num: int = 0
    fields: list[Field] | None = None
    shared_num: int = 0
    consistency_level: int = 0
    enable_dynamic_schema: bool = False
    document_converter: DocumentConverter | None = None
    metric_type: MetricType | None = None

    def check(self) -> None:
        """Validate required settings and apply defaults."""
        if self.client is None:
            raise IndexerError("[NewIndexer] milvus client not provided")
        if self.embedding is None:
            raise IndexerError("[NewIndexer] embedding not provided")
        if not self.collection:
            self.collection = DEFAULT_COLLECTION
        if not self.description:
            self.description = DEFAULT_DESCRIPTION
        if self.shared_num <= 0:
            self.shared_num = 1
        if self.consistency_level <= 0 or self.consistency_level > 5:
            self.consistency_level = DEFAULT_CONSISTENCY_LEVEL
        else:
            self.consistency_level = ConsistencyLevel(self.consistency_level)
        if not self.metric_type:
            self.metric_type = DEFAULT_METRIC_TYPE
        if self.partition_num <= 1:
            self.partition_num = 0
        if self.fields is None:
            from .milvus_types import default_fields

            self.fields = default_fields()
        if self.document_converter is None:
            self.document_converter = _default_document_converter

    def build_schema(self) -> Schema:
        """Schema for the configured collection."""
        return Schema(name=self.collection, description=self.description, fields=list(self.fields or []))

    def check_collection_schema(self, schema: Schema) -> bool:
        """Whether an existing collection's fields match the configured ones by name and type."""
        expected = self.fields or []
        if len(schema.fields) != len(expected):
            return False
        count = sum(
            1
            for existing in schema.fields
            for wanted in expected
            if existing.name == wanted.name and existing.data_type == wanted.data_type
        )
        return count == len(expected)

    def _create_default_index(self) -> None:
        try:
            self.client.create_index(self.collection, DEFAULT_INDEX_FIELD, self.metric_type, False)
        except Exception as exc:
            raise IndexerError(f"[NewIndexer] failed to create index: {exc}") from exc

    def _load_collection(self) -> None:
        try:
            state = self.client.get_load_state(self.collection)
        except Exception as exc:
            raise IndexerError(f"[NewIndexer] failed to get load state: {exc}") from exc

        if state is LoadState.NOT_EXIST:
            raise IndexerError("[NewIndexer] collection not exist")
        if state is LoadState.NOT_LOAD:
            try:
                index = self.client.describe_index(self.collection, DEFAULT_INDEX_FIELD)
            except ConnectionError as exc:
                raise IndexerError(f"[NewIndexer] milvus client not ready: {exc}") from exc
            except Exception as exc:
                log.warning("describe index on %s failed: %s", self.collection, exc)
                index = []
            if not index:
                self._create_default_index()
            self.client.load_collection(self.collection, True)
        elif state is LoadState.LOADING:
            while True:
                time.sleep(LOADING_POLL_INTERVAL)
                if self.client.get_loading_progress(self.collection) == 100:
                    return


class Indexer:
    """Stores documents with their embeddings in one collection."""

    def __init__(self, config: IndexerConfig) -> None:
        self.config = config

    @property
    def type_name(self) -> str:
        return TYPE_NAME

    def store(self, docs: Sequence[Document], embedding: Embedder | None = None) -> list[str]:
        """Embed and insert documents in batches; return the stored ids.

        Failed batches are skipped; if any failed, an ``IndexerError`` is raised
        whose ``ids`` holds the ids of the batches that were stored.
        """
        embedder = embedding if embedding is not None else self.config.embedding
        if embedder is None:
            raise IndexerError("[Indexer.Store] embedding not provided")

        client = self.config.client
        stored: list[str] = []
        errors: list[str] = []

        for start in range(0, len(docs), BATCH_SIZE):
            batch = list(docs[start : start + BATCH_SIZE])
            end = start + len(batch) - 1
            number = start // BATCH_SIZE
            label = f"batch {number} (docs {start}-{end})"
            log.info("[Indexer.Store] Processing batch: %d to %d (total %d)", start, end, len(docs))

            try:
                vectors = embedder.embed_strings([doc.content for doc in batch])
            except Exception as exc:
                errors.append(f"{label} embedding failed: {exc}")
                log.error("[Indexer.Store] %s", errors[-1])
                continue
            if len(vectors) != len(batch):
                errors.append(
                    f"{label} embedding result length mismatch: expected {len(batch)}, got {len(vectors)}"
                )
                log.error("[Indexer.Store] %s", errors[-1])
                continue

            try:
                rows = self.config.document_converter(batch, vectors)
            except Exception as exc:
                errors.append(f"{label} document conversion failed: {exc}")
                log.error("[Indexer.Store] %s", errors[-1])
                continue

            try:
                results = client.insert_rows(self.config.collection, "", rows)
            except Exception as exc:
                errors.append(f"{label} Milvus InsertRows failed: {exc}")
                log.error("[Indexer.Store] %s", errors[-1])
                continue

            bad = next(((i, v) for i, v in enumerate(results) if not isinstance(v, str)), None)
            if bad is not None:
                errors.append(
                    f"{label} failed to get ID from Milvus result at index {bad[0]}: "
                    f"not a string ({type(bad[1]).__name__})"
                )
                log.error("[Indexer.Store] %s", errors[-1])
                continue
            stored.extend(results)
            log.info("[Indexer.Store] Successfully inserted %s, %d IDs obtained.", label, len(results))

        if stored:
            try:
                client.flush(self.config.collection, False)
            except Exception as exc:
                errors.append(
                    f"failed to flush Milvus collection '{self.config.collection}' after all batches: {exc}"
                )
                log.error("[Indexer.Store] %s", errors[-1])
        elif docs and errors:
            log.warning("[Indexer.Store] No documents were successfully stored.")

        if errors:
            joined = "; ".join(errors)
            if len(joined) > MAX_ERROR_LENGTH:
                joined = joined[:MAX_ERROR_LENGTH] + "...(truncated)"
            raise IndexerError(f"[Indexer.Store] completed with errors: {joined}", stored)
        return stored

    def delete(self, ids: Sequence[str]) -> None:
        """Delete the entries with the given ids and flush the collection."""
        if not ids:
            return
        quoted = ",".join(f'"{id_}"' for id_ in ids)
        expr = f"id in [{quoted}]"
        log.info("[Milvus Delete] expr: %s", expr)
        try:
            self.config.client.delete(self.config.collection, "", expr)
        except Exception as exc:
            raise IndexerError(f"milvus delete failed: {exc}") from exc
        try:
            self.config.client.flush(self.config.collection, False)
        except Exception as exc:
            raise IndexerError(f"milvus flush failed after delete: {exc}") from exc

    def delete_collection(self, collection_name: str) -> None:
        """Drop a whole collection."""
        self.config.client.drop_collection(collection_name)


def new_indexer(config: IndexerConfig) -> Indexer:
    """Check the config, create and load its collection if needed, and return an indexer."""
    config.check()
    client = config.client
    try:
        exists = client.has_collection(config.collection)
    except ConnectionError as exc:
        raise IndexerError(f"[NewIndexer] milvus client not ready: {exc}") from exc
    except Exception as exc:
        raise IndexerError(f"[NewIndexer] failed to check collection: {exc}") from exc

    if not exists:
        try:
            client.create_collection(
                config.build_schema(),
                config.shared_num,
                consistency_level=ConsistencyLevel(config.consistency_level).to_client_level(),
                enable_dynamic_schema=config.enable_dynamic_schema,
                partition_num=config.partition_num,
            )
        except Exception as exc:
            raise IndexerError(f"[NewIndexer] failed to create collection: {exc}") from exc

    try:
        info = client.describe_collection(config.collection)
    except Exception as exc:
        raise IndexerError(f"[NewIndexer] failed to describe collection: {exc}") from exc
    if not config.check_collection_schema(info.schema):
        raise IndexerError("[NewIndexer] collection schema not match")
    if not info.loaded:
        config._load_collection()
    return Indexer(config)