"""Row records for the dataset, FAQ, file and material tables."""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Mapping, TypeVar

_R = TypeVar("_R", bound="_Record")


class _Record:
    """Shared row conversion for the table records."""

    table: ClassVar[str]

    @classmethod
    def columns(cls) -> tuple[str, ...]:
        """Column names in declaration order."""
        return tuple(f.name for f in fields(cls))

    def to_row(self) -> dict[str, Any]:
        """Return the record as a column -> value mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_row(cls: type[_R], row: Mapping[str, Any]) -> _R:
        """Build a record from a row, ignoring columns the record does not know."""
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key in row.keys():
            column = known.get(key)
            if column is None:
                continue
            value = row[key]
            if column.type is bool and value is not None:
                value = bool(value)
            values[key] = value
        return cls(**values)


@dataclass
class Dataset(_Record):
    table: ClassVar[str] = "rag_dataset"

    id: int = 0
    corp_id: int = 0
    robot_uid: int = 0
    name: str = ""
    description: str = ""
    is_public: bool = False
    provider: str = ""
    permission: str = ""
    data_source_type: str = ""
    indexing_technique: str = ""
    index_struct: str = ""
    embedding_model: str = ""
    embedding_model_provider: str = ""
    retrieval_model: str = ""
    built_in_field_enabled: bool = False
    collection_name: str = ""
    is_default: bool = False
    faq_count: int = 0
    created_by: int = 0
    created_at: int = 0
    updated_at: int = 0
    deleted_at: int = 0


@dataclass
class FAQ(_Record):
    table: ClassVar[str] = "rag_faq"

    id: int = 0
    corp_id: int = 0
    robot_uid: int = 0
    dataset_id: int = 0
    category_id: int = 0
    faq_type: int = 0
    question: str = ""
    answer: str = ""
    keywords: str = ""
    embedding_id: str = ""
    content_hash: str = ""
    source_type: str = ""
    source_id: int = 0
    status: int = 0
    error_msg: str = ""
    enabled: bool = False
    create_method: int = 0
    speechcraft_material_ids: str = ""
    has_manual_media: bool = False
    created_at: int = 0
    updated_at: int = 0
    deleted_at: int = 0


@dataclass
class FAQCategory(_Record):
    table: ClassVar[str] = "rag_faq_category"

    id: int = 0
    corp_id: int = 0
    robot_uid: int = 0
    dataset_id: int = 0
    name: str = ""
    sort_order: int = 0
    created_at: int = 0
    updated_at: int = 0
    deleted_at: int = 0


@dataclass
class RagFile(_Record):
    table: ClassVar[str] = "rag_files"

    id: int = 0
    corp_id: int = 0
    file_name: str = ""
    file_url: str = ""
    file_size: int = 0
    file_extension: str = ""
    mime_type: str = ""
    storage_type: str = ""
    status: int = 0
    error_msg: str = ""
    used: bool = False
    used_in_dataset_id: int = 0
    word_count: int = 0
    tokens: int = 0
    created_by: int = 0
    created_at: int = 0
    updated_at: int = 0
    deleted_at: int = 0


@dataclass
class FAQManualMedia(_Record):
    table: ClassVar[str] = "rag_faq_manual_media"

    id: int = 0
    corp_id: int = 0
    faq_id: int = 0
    material_id: int = 0
    created_at: int = 0
    updated_at: int = 0


@dataclass
class ManualMaterial(_Record):
    table: ClassVar[str] = "rag_manual_material"

    id: int = 0
    corp_id: int = 0
    type: int = 0
    file_name: str = ""
    file_url: str = ""
    file_size: int = 0
    mime_type: str = ""
    created_at: int = 0
    updated_at: int = 0