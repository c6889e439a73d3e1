import io

import pytest

from ragadmin.csv_loader import (
    CSVWithHeaderRow,
    RecursiveCharacterSplitter,
    load_and_split_csv,
    load_and_split_csv_with_header_row,
    load_documents_from_file,
)
from ragadmin.documents import SourceDocument


def test_load_builds_field_lines_and_metadata():
    docs = CSVWithHeaderRow(io.StringIO("question,answer,category\nq1,a1,c1\n")).load()
    assert len(docs) == 1
    assert docs[0].page_content == "question: q1\nanswer: a1\ncategory: c1"
    assert docs[0].metadata["row"] == 1
    assert docs[0].metadata["category"] == "c1"


def test_load_filters_columns_but_keeps_metadata():
    docs = CSVWithHeaderRow(io.StringIO("question,answer,category\nq1,a1,c1\n"), 0, "question").load()
    assert docs[0].page_content == "question: q1"
    assert docs[0].metadata["answer"] == "a1"


def test_load_ignores_extra_fields():
    docs = CSVWithHeaderRow(io.StringIO("question,answer\nq1,a1,extra\n")).load()
    assert docs[0].page_content == "question: q1\nanswer: a1"
    assert "extra" not in docs[0].metadata.values()


def test_load_header_row_index_skips_title():
    text = "Title line\nquestion,answer\nq1,a1\nq2,a2\n"
    docs = CSVWithHeaderRow(io.StringIO(text), 1).load()
    assert [d.metadata["question"] for d in docs] == ["q1", "q2"]
    assert [d.metadata["row"] for d in docs] == [1, 2]


def test_load_skips_blank_lines_and_short_rows():
    docs = CSVWithHeaderRow(io.StringIO("question,answer\n\nq1\n")).load()
    assert len(docs) == 1
    assert docs[0].page_content == "question: q1"


def test_load_empty_input_raises():
    with pytest.raises(ValueError):
        CSVWithHeaderRow(io.StringIO("")).load()


def test_load_malformed_quote_raises():
    with pytest.raises(ValueError):
        CSVWithHeaderRow(io.StringIO('question,answer\nq1,"unterminated\n')).load()


def test_load_accepts_bytes_stream():
    docs = CSVWithHeaderRow(io.BytesIO("question,answer\nq1,a1\n".encode("utf-8"))).load()
    assert docs[0].metadata["answer"] == "a1"


def test_splitter_merges_pieces():
    splitter = RecursiveCharacterSplitter(separators=["\n\n"], chunk_size=10, chunk_overlap=0)
    assert splitter.split_text("aaaa\n\nbbbb\n\ncccc") == ["aaaa\n\nbbbb", "cccc"]


def test_splitter_chunks_respect_size_and_cover_text():
    text = " ".join(f"word{i}" for i in range(50))
    splitter = RecursiveCharacterSplitter(chunk_size=30, chunk_overlap=0)
    chunks = splitter.split_text(text)
    assert all(len(chunk) <= 30 for chunk in chunks)
    assert " ".join(chunks).split() == text.split()


def test_splitter_keeps_long_piece_without_further_separators():
    long_row = "x" * 300
    splitter = RecursiveCharacterSplitter(separators=["\n\n"], chunk_size=200, chunk_overlap=20)
    assert splitter.split_text(long_row) == [long_row]


def test_split_documents_copies_metadata():
    splitter = RecursiveCharacterSplitter(separators=["\n\n"], chunk_size=5, chunk_overlap=0)
    source = SourceDocument(page_content="aaaa\n\nbbbb", metadata={"row": 1})
    parts = splitter.split_documents([source])
    assert [p.page_content for p in parts] == ["aaaa", "bbbb"]
    assert all(p.metadata == {"row": 1} for p in parts)
    parts[0].metadata["row"] = 99
    assert source.metadata["row"] == 1


def test_splitter_requires_separators():
    with pytest.raises(ValueError):
        RecursiveCharacterSplitter(separators=[])


def test_load_and_split_csv_produces_documents():
    docs = load_and_split_csv(io.StringIO("question,answer,category\nq1,a1,c1\n,,c2\n"), 200, 20)
    assert [d.content for d in docs] == ["q1\na1"]
    assert docs[0].metadata["category"] == "c1"


def test_load_and_split_with_header_row():
    docs = load_and_split_csv_with_header_row(io.StringIO("T\nquestion,answer\nq1,a1\n"), 200, 20, 1)
    assert docs[0].content == "q1\na1"


def test_load_documents_from_csv_file():
    docs = load_documents_from_file(io.StringIO("question,answer\nq1,a1\n"), ".csv")
    assert docs[0].metadata == {"question": "q1", "answer": "a1"}


def test_load_documents_unsupported_extension():
    with pytest.raises(ValueError, match="unsupported file type"):
        load_documents_from_file(io.StringIO(""), ".pdf")