[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ragadmin"
version = "0.1.0"
description = "FAQ knowledge-base building blocks: CSV loading, vector indexing and retrieval through pluggable clients, and SQLite record storage."
requires-python = ">=3.10"
dependencies = []
keywords = ["rag", "faq", "knowledge-base", "vector-search", "milvus", "embeddings", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ragadmin"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
