"""Vector store types, defaults and interfaces used by the indexer and retriever."""

import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Protocol, Sequence

TYPE_NAME = "Milvus"
DEFAULT_COLLECTION = "eino_collection"
DEFAULT_DESCRIPTION = "the collection for eino"
DEFAULT_COLLECTION_ID = "id"
DEFAULT_COLLECTION_ID_DESC = "the unique id of the document"
DEFAULT_COLLECTION_VECTOR = "vector"
DEFAULT_COLLECTION_VECTOR_DESC = "the vector of the document"
DEFAULT_COLLECTION_CONTENT = "content"
DEFAULT_COLLECTION_CONTENT_DESC = "the content of the document"
DEFAULT_COLLECTION_METADATA = "metadata"
DEFAULT_COLLECTION_METADATA_DESC = "the metadata of the document"
DEFAULT_DIM = 1536
DEFAULT_INDEX_FIELD = "vector"


class ConsistencyLevel(IntEnum):
    STRONG = 1
    SESSION = 2
    BOUNDED = 3
    EVENTUALLY = 4
    CUSTOMIZED = 5

    def to_client_level(self) -> int:
        """Return the level as numbered by the vector store client (zero-based)."""
        return self.value - 1


class MetricType(str, Enum):
    HAMMING = "HAMMING"
    JACCARD = "JACCARD"
    L2 = "L2"
    IP = "IP"
    COSINE = "COSINE"


DEFAULT_CONSISTENCY_LEVEL = ConsistencyLevel.BOUNDED
DEFAULT_METRIC_TYPE = MetricType.COSINE


class FieldType(str, Enum):
    INT64 = "Int64"
    VARCHAR = "VarChar"
    FLOAT_VECTOR = "FloatVector"
    JSON = "JSON"


class LoadState(Enum):
    NOT_EXIST = "NotExist"
    NOT_LOAD = "NotLoad"
    LOADING = "Loading"
    LOADED = "Loaded"


@dataclass
class Field:
    name: str
    data_type: FieldType
    description: str = ""
    is_primary_key: bool = False
    auto_id: bool = False
    max_length: int | None = None
    dim: int | None = None


@dataclass
class Schema:
    name: str
    description: str = ""
    fields: list[Field] = field(default_factory=list)


@dataclass
class CollectionInfo:
    schema: Schema
    loaded: bool = False


@dataclass
class SearchResult:
    """Hits for one query vector; ``fields`` maps output field name to column values."""

    ids: list[Any] = field(default_factory=list)
    scores: list[float] = field(default_factory=list)
    fields: dict[str, list[Any]] = field(default_factory=dict)

    @property
    def result_count(self) -> int:
        return len(self.ids)


@dataclass
class DefaultRow:
    """Row layout of the default collection."""

    id: str
    content: str
    vector: list[float]
    metadata: bytes


class Embedder(Protocol):
    def embed_strings(self, texts: Sequence[str]) -> list[list[float]]: ...


class VectorClient(Protocol):
    def has_collection(self, name: str) -> bool: ...

    def create_collection(
        self,
        schema: Schema,
        shards_num: int,
        *,
        consistency_level: int,
        enable_dynamic_schema: bool,
        partition_num: int,
    ) -> None: ...

    def describe_collection(self, name: str) -> CollectionInfo: ...

    def get_load_state(self, name: str) -> LoadState: ...

    def describe_index(self, collection: str, field_name: str) -> list[Any]: ...

    def create_index(self, collection: str, field_name: str, metric_type: MetricType, async_: bool) -> None: ...

    def load_collection(self, name: str, async_: bool) -> None: ...

    def get_loading_progress(self, name: str) -> int: ...

    def insert_rows(self, collection: str, partition: str, rows: list[Any]) -> list[str]: ...

    def flush(self, collection: str, async_: bool) -> None: ...

    def delete(self, collection: str, partition: str, expr: str) -> None: ...

    def drop_collection(self, name: str) -> None: ...

    def search(
        self,
        collection: str,
        output_fields: list[str],
        vectors: list[list[float]],
        vector_field: str,
        metric_type: MetricType,
        top_k: int,
        params: dict[str, Any],
    ) -> list[SearchResult]: ...


def default_fields() -> list[Field]:
    """Fields of the default collection: id, vector, content and metadata."""
    return [
        Field(
            name=DEFAULT_COLLECTION_ID,
            description=DEFAULT_COLLECTION_ID_DESC,
            is_primary_key=True,
            data_type=FieldType.VARCHAR,
            max_length=255,
        ),
        Field(
            name=DEFAULT_COLLECTION_VECTOR,
            description=DEFAULT_COLLECTION_VECTOR_DESC,
            data_type=FieldType.FLOAT_VECTOR,
            dim=DEFAULT_DIM,
        ),
        Field(
            name=DEFAULT_COLLECTION_CONTENT,
            description=DEFAULT_COLLECTION_CONTENT_DESC,
            data_type=FieldType.VARCHAR,
            max_length=1024,
        ),
        Field(
            name=DEFAULT_COLLECTION_METADATA,
            description=DEFAULT_COLLECTION_METADATA_DESC,
            data_type=FieldType.JSON,
        ),
    ]


def vector_to_bytes(vector: Sequence[float]) -> bytes:
    """Pack a vector as little-endian 32-bit floats."""
    return struct.pack(f"<{len(vector)}f", *vector)


def to_float32(vec: Sequence[float]) -> list[float]:
    """Round every component to 32-bit float precision."""
    return list(struct.unpack(f"<{len(vec)}f", vector_to_bytes(vec)))