"""Vector collection layout for FAQ entries and FAQ-to-document conversion."""

from dataclasses import asdict, dataclass
from typing import Any

from .documents import Document
from .milvus_types import Field, FieldType
from .records import FAQ

FIELD_ID = "id"
FIELD_VECTOR = "vector"
FIELD_CONTENT = "content"
FIELD_METADATA = "metadata"
VECTOR_DIM = 1536


def build_milvus_faq_schema() -> list[Field]:
    """Fields of an FAQ collection: id, vector, merged content and JSON metadata."""
    return [
        Field(
            name=FIELD_ID,
            data_type=FieldType.VARCHAR,
            is_primary_key=True,
            auto_id=False,
            max_length=64,
        ),
        Field(name=FIELD_VECTOR, data_type=FieldType.FLOAT_VECTOR, dim=VECTOR_DIM),
        Field(name=FIELD_CONTENT, data_type=FieldType.VARCHAR, max_length=2048),
        Field(name=FIELD_METADATA, data_type=FieldType.JSON),
    ]


@dataclass
class FAQMetaData:
    """Business fields of an FAQ kept alongside its vector."""

    faq_id: int = 0
    question: str = ""
    answer: str = ""
    faq_type: int = 0
    source_type: str = ""
    source_id: int = 0
    dataset_id: int = 0
    category_id: int = 0
    speechcraft_material_ids: str = ""
    has_manual_media: bool = False

    @classmethod
    def from_faq(cls, faq: FAQ) -> "FAQMetaData":
        return cls(
            faq_id=faq.id,
            question=faq.question,
            answer=faq.answer,
            faq_type=faq.faq_type,
            source_type=faq.source_type,
            source_id=faq.source_id,
            dataset_id=faq.dataset_id,
            category_id=faq.category_id,
            speechcraft_material_ids=faq.speechcraft_material_ids,
            has_manual_media=faq.has_manual_media,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the metadata as a JSON-ready mapping."""
        return asdict(self)


def convert_faq_to_document(faq: FAQ) -> Document:
    """Build the indexable document for an FAQ row, keyed by its embedding id."""
    content = ""
    if faq.question:
        content += faq.question + "\n"
    if faq.answer:
        content += faq.answer
    return Document(
        id=faq.embedding_id,
        content=content,
        metadata=FAQMetaData.from_faq(faq).to_dict(),
    )