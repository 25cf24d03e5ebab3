[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "barqvault"
version = "0.1.0"
description = "Core of a multimodal embedding store: hybrid BM25 + vector search, compression and an ingestion pipeline"
requires-python = ">=3.10"
keywords = [
    "embeddings",
    "bm25",
    "vector-search",
    "hybrid-search",
    "rrf",
    "ingestion",
    "compression",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Text Processing :: Indexing",
    "Topic :: System :: Archiving :: Compression",
]
dependencies = [
    "numpy",
    "lz4",
    "zstandard",
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["barqvault"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
