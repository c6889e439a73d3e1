"""Documents as loaded from files and as stored in the vector index."""

from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass
class Document:
    """A document ready for embedding and indexing."""

    id: str = ""
    content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    score: float | None = None


@dataclass
class SourceDocument:
    """A raw document produced by a loader, before conversion."""

    page_content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


def parse_qa_from_content(content: str) -> dict[str, str]:
    """Parse ``field: value`` lines into a mapping, keeping field names as given."""
    data: dict[str, str] = {}
    for line in content.split("\n"):
        line = line.strip()
        if not line:
            continue
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        if name:
            data[name] = value.strip()
    return data


def to_documents(docs: Iterable[SourceDocument]) -> list[Document]:
    """Turn loaded documents into question/answer documents, dropping empty ones."""
    result = []
    for doc in docs:
        fields = parse_qa_from_content(doc.page_content)
        question = fields.get("question", "").strip()
        answer = fields.get("answer", "").strip()
        if not question and not answer:
            continue
        result.append(Document(content=f"{question}\n{answer}", metadata=dict(fields)))
    return result