# ragadmin

Building blocks for running an FAQ knowledge base behind a
retrieval-augmented generation service. The package has no third-party
dependencies.

## What is in it

- **Loading** (`ragadmin.csv_loader`, `ragadmin.documents`).
  `load_documents_from_file(stream, ext)` accepts `.csv` only and raises
  `ValueError` for any other extension. It reads a CSV whose first row is the
  header and returns `Document` objects. Each document's content is
  `"<question>\n<answer>"`, and its metadata holds the row's `field: value`
  pairs. Rows with neither a question nor an answer are dropped. For other
  header rows, column filters or chunk sizes, use
  `load_and_split_csv_with_header_row`, `load_and_split_csv`,
  `CSVWithHeaderRow` and `RecursiveCharacterSplitter` directly.
- **Collection types** (`ragadmin.milvus_types`). This module holds the
  enums `ConsistencyLevel`, `MetricType`, `FieldType` and `LoadState`, the
  `Field` and `Schema` descriptions, and `default_fields()`. It also defines
  two protocols, `VectorClient` and `Embedder`, which your own vector database
  client and embedding model must implement.
- **Indexing** (`ragadmin.milvus_indexer`).
  - `new_indexer(config)` checks an `IndexerConfig` and applies its defaults.
  - It creates the collection if it is missing, and raises `IndexerError` if
    the existing fields do not match. It loads the collection when needed.
  - `Indexer.store` embeds and inserts documents in batches of 20, then
    flushes the collection.
  - Failed batches are skipped. If any batch failed, one `IndexerError` is
    raised, and its `ids` attribute holds the ids that were stored.
  - `Indexer.delete` and `Indexer.delete_collection` remove entries or a
    whole collection.
- **FAQ layout** (`ragadmin.faq_schema`).
  - `build_milvus_faq_schema()` gives the FAQ collection fields: id, vector of
    dimension 1536, content and JSON metadata.
  - `convert_faq_to_document(faq)` turns an `FAQ` record into a `Document`,
    keyed by its embedding id and carrying its `FAQMetaData`.
- **Indexer cache** (`ragadmin.indexer_pool`). `IndexerManager` keeps one
  indexer per collection. `init_global_indexer` and `get_indexer` manage a
  process-wide instance.
- **Retried vector operations** (`ragadmin.vector_service`).
  - This module provides `store_milvus_vectors`, `delete_milvus_vectors` and
    `delete_milvus_collection`.
  - Each tries its operation up to 5 times, 3 seconds apart; both are keyword
    arguments you can change.
  - Each uses the given `manager`, or the global one when none is given.
- **Retrieval** (`ragadmin.retriever`).
  - `MilvusRetriever` checks that its collection exists and waits for it to
    load.
  - `get_relevant_documents(query, top_k=None)` returns scored documents.
    `top_k` defaults to 10.
  - `RetrieverManager.get_retriever` caches one retriever per collection. When
    you pass a specific `embedder`, it builds a fresh, uncached retriever
    instead.
  - Failures raise `RetrieverError`.
- **Record storage** (`ragadmin.database` and the store modules).
  - `Database` keeps the record tables in SQLite (in memory by default) and
    creates them on open. The records are `Dataset`, `FAQ`, `FAQCategory`,
    `RagFile`, `FAQManualMedia` and `ManualMaterial`.
  - `Database.transaction()` is a context manager; nested blocks use
    savepoints.
  - Single-row lookups raise `NotFoundError`. Listings return a `Page`.
  - Six stores sit on top of it: `DatasetStore`, `FAQStore`,
    `FAQCategoryStore`, `FileStore`, `FAQManualMediaStore` and
    `ManualMaterialStore`.
  - Most dataset, FAQ and category queries take a corp id. Lookups by plain id
    and the manual media stores do not.

## Example

```python
import io
from ragadmin.csv_loader import load_documents_from_file

data = io.StringIO("question,answer,category\nHow do I log in?,Use your account name,Account\n")
for doc in load_documents_from_file(data, ".csv"):
    print(doc.content, doc.metadata)
```

## What it does not do

- It has no server, request handlers or command-line program.
- It does not include a vector database client or an embedding model. You
  supply objects that implement `VectorClient` and `Embedder`.
- It does not download uploaded files, read spreadsheet formats other than
  CSV, or run background import and embedding jobs. Callers combine the
  loaders, stores and vector operations themselves.

## Installation and tests

```
pip install .
pip install ".[test]"
pytest
```