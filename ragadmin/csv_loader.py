"""Loading CSV files with a header row into documents, with text splitting."""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import IO, Iterable, Iterator

from .documents import Document, SourceDocument, to_documents

log = logging.getLogger(__name__)


def _split_on(text: str, separator: str) -> list[str]:
    if separator == "":
        return list(text)
    return text.split(separator)


@dataclass
class RecursiveCharacterSplitter:
    """Split text on a list of separators, merging pieces up to a chunk size."""

    separators: list[str] = field(default_factory=lambda: ["\n\n", "\n", " ", ""])
    chunk_size: int = 512
    chunk_overlap: int = 100

    def __post_init__(self) -> None:
        if not self.separators:
            raise ValueError("at least one separator is required")

    def split_text(self, text: str) -> list[str]:
        """Split one text into chunks."""
        return self._split(text, self.separators)

    def split_documents(self, docs: Iterable[SourceDocument]) -> list[SourceDocument]:
        """Split every document, copying its metadata onto each chunk."""
        return [
            SourceDocument(page_content=chunk, metadata=dict(doc.metadata))
            for doc in docs
            for chunk in self.split_text(doc.page_content)
        ]

    def _split(self, text: str, separators: list[str]) -> list[str]:
        separator = separators[-1]
        remaining: list[str] = []
        for i, candidate in enumerate(separators):
            if candidate == "" or candidate in text:
                separator = candidate
                remaining = separators[i + 1 :]
                break

        chunks: list[str] = []
        good: list[str] = []
        for piece in _split_on(text, separator):
            if len(piece) < self.chunk_size:
                good.append(piece)
                continue
            if good:
                chunks.extend(self._merge(good, separator))
                good = []
            if remaining:
                chunks.extend(self._split(piece, remaining))
            else:
                chunks.append(piece)
        if good:
            chunks.extend(self._merge(good, separator))
        return chunks

    def _should_pop(self, total: int, split_len: int, sep_len: int, current_len: int) -> bool:
        if current_len < 2:
            sep_len = 0
        return current_len > 0 and (
            total > self.chunk_overlap
            or (total + split_len + sep_len > self.chunk_size and total > 0)
        )

    def _merge(self, splits: list[str], separator: str) -> list[str]:
        sep_len = len(separator)
        docs: list[str] = []
        current: list[str] = []
        total = 0
        for piece in splits:
            with_piece = total + len(piece) + (sep_len if current else 0)
            if with_piece > self.chunk_size and current:
                joined = separator.join(current).strip()
                if joined:
                    docs.append(joined)
                while self._should_pop(total, len(piece), sep_len, len(current)):
                    total -= len(current[0])
                    if len(current) > 1:
                        total -= sep_len
                    current = current[1:]
            current.append(piece)
            total += len(piece)
            if len(current) > 1:
                total += sep_len
        joined = separator.join(current).strip()
        if joined:
            docs.append(joined)
        return docs


def _read_text(stream: IO) -> str:
    data = stream.read()
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    return data


class CSVWithHeaderRow:
    """CSV loader whose header is taken from a given row; earlier rows are skipped."""

    def __init__(self, stream: IO, header_row_index: int = 0, *columns: str) -> None:
        self.stream = stream
        self.header_row_index = header_row_index
        self.columns = list(columns)

    def _rows(self) -> Iterator[list[str]]:
        reader = csv.reader(io.StringIO(_read_text(self.stream), newline=""), strict=True)
        try:
            for row in reader:
                if row:
                    yield row
        except csv.Error as exc:
            raise ValueError(f"CSV parse error at line {reader.line_num}: {exc}") from exc

    def load(self) -> list[SourceDocument]:
        """Read the CSV into one document per data row."""
        rows = self._rows()
        header: list[str] = []
        for i in range(self.header_row_index + 1):
            row = next(rows, None)
            if row is None:
                raise ValueError(f"failed to read row {i + 1}: unexpected end of input")
            header = row

        docs = []
        for row_number, row in enumerate(rows, start=1):
            content = []
            for i, value in enumerate(row):
                if i >= len(header):
                    log.warning("row %d has too many fields, value %r ignored", row_number - 1, value)
                    break
                if self.columns and header[i] not in self.columns:
                    continue
                content.append(f"{header[i]}: {value}")
            metadata: dict = {"row": row_number}
            metadata.update(zip(header, row))
            docs.append(SourceDocument(page_content="\n".join(content), metadata=metadata))
        return docs

    def load_and_split(self, splitter: RecursiveCharacterSplitter) -> list[SourceDocument]:
        """Load the CSV and split each document with ``splitter``."""
        return splitter.split_documents(self.load())


def load_and_split_csv_with_header_row(
    stream: IO, chunk_size: int, chunk_overlap: int, header_row_index: int, *args: str
) -> list[Document]:
    """Load a CSV with its header at ``header_row_index`` and convert it to documents."""
    loader = CSVWithHeaderRow(stream, header_row_index, *args)
    splitter = RecursiveCharacterSplitter(
        separators=["\n\n"], chunk_size=chunk_size, chunk_overlap=chunk_overlap
    )
    return to_documents(loader.load_and_split(splitter))


def load_and_split_csv(stream: IO, chunk_size: int, chunk_overlap: int, *args: str) -> list[Document]:
    """Load a CSV whose first row is the header and convert it to documents."""
    return load_and_split_csv_with_header_row(stream, chunk_size, chunk_overlap, 0, *args)


def load_documents_from_file(stream: IO, ext: str) -> list[Document]:
    """Load documents from a file stream according to its extension."""
    if ext == ".csv":
        return load_and_split_csv(stream, 200, 20)
    raise ValueError(f"unsupported file type: {ext}")