# barqvault

The core of a multimodal embedding database, packaged as a Python library.

- **Indexing** (`barqvault.bm25`, `barqvault.vector`, `barqvault.metadata_index`, `barqvault.hybrid`): `Bm25Index` is a BM25 inverted index. `VectorIndex` is a brute-force cosine-similarity index. `MetadataIndex` filters records by modality and by string metadata values. `HybridEngine` fuses the BM25 and vector rankings with Reciprocal Rank Fusion (k = 60) and limits the results with the metadata filters. `IndexManager` (`barqvault.manager`) keeps the three indexes in step with a record store.
- **Tokenizing** (`barqvault.tokenizer`): `tokenize` lowercases, drops stopwords and tokens shorter than three bytes, and removes duplicates. `tokenize_query` is the same but keeps stopwords and two-byte tokens.
- **Compression** (`barqvault.compression`, `barqvault.embedding`): provides the LZMA (XZ), LZ4 block and Zstd codecs through `compress`, `decompress` and `select_codec_for_modality`. Embeddings are stored delta-f32 encoded and then Zstd-compressed (`compress_embedding`, `decompress_embedding`).
- **Ingestion** (`barqvault.detector`, `barqvault.extraction`, `barqvault.stt`, `barqvault.chunker`, `barqvault.summarizer`, `barqvault.embedder`, `barqvault.pipeline`): detects the modality and MIME type, extracts text, splits it into sentence-aware chunks, summarizes it with an LLM, embeds it, and builds `BarqRecord`s.
- **Wire conversion** (`barqvault.convert`): converts requests and records to and from protobuf-shaped dataclasses (`ProtoIngestRequest`, `ProtoSearchRequest`, `ProtoSearchResult`).

The domain types and errors are in `barqvault.models`. Every error is a subclass of `BarqError`: `ProviderError`, `CompressionError`, `InvalidInputError` or `IngestError`.

## Installation

```
pip install barqvault
```

To run the test suite, install `barqvault[test]`.

## Hybrid search

```python
import uuid
from barqvault.hybrid import HybridEngine, SearchParams

engine = HybridEngine(1.5, 0.75, 4)
doc_id = uuid.uuid4()
engine.bm25.index_document(doc_id, ["rust", "fast"])
engine.vector.upsert(doc_id, [1.0, 0.0, 0.0, 0.0])

hits = engine.search(SearchParams(
    query_embedding=[1.0, 0.0, 0.0, 0.0],
    query_text="rust",
    vector_weight=0.5,
    top_k=5,
))
# [(doc_id, rrf_score), ...], highest score first
```

`vector_weight` sets the balance between the two rankings. At 0.0 only BM25 counts, and at 1.0 only the vector ranking counts. The `modality_filter` and `metadata_filters` options restrict the results to records that were indexed in `engine.meta`.

## Compression

```python
from barqvault.compression import compress, decompress, select_codec_for_modality
from barqvault.models import Modality

codec = select_codec_for_modality(Modality.TEXT)   # LZMA level 6
packed = compress(b"hello hello hello", codec)
assert decompress(packed, codec, 17) == b"hello hello hello"
```

Each modality gets its own codec:

| Modality | Codec |
| --- | --- |
| text, document | LZMA 6 |
| audio | LZMA 4 |
| image | Zstd 9 |
| video | LZ4 |

For LZ4 and Zstd, the size passed to `decompress` is a hard limit on the output. For LZMA it is only the starting buffer size, which is doubled up to three times when the output does not fit.

## Ingestion

```python
import asyncio
from barqvault.pipeline import IngestConfig, IngestPipeline
from barqvault.summarizer import LlmConfig, LlmProvider
from barqvault.embedder import EmbedConfig, EmbedProvider
from barqvault.models import IngestRequest, StorageMode

config = IngestConfig(
    llm=LlmConfig(provider=LlmProvider.LOCAL),
    embed=EmbedConfig(provider=EmbedProvider.LOCAL, expected_dim=64),
)
pipeline = IngestPipeline(config)
request = IngestRequest(
    storage_mode=StorageMode.HYBRID_FILE,
    filename="notes.txt",
    raw_payload=b"Some notes worth keeping.",
)
records = asyncio.run(pipeline.run(request))
```

The pipeline works out the modality from the filename and the magic bytes. When the text is split into several chunks, each chunk becomes one record, and all of those records share a new `parent_id`. Each record carries:

- a BLAKE2s checksum of the raw payload;
- the compressed payload, except in `StorageMode.TEXT_ONLY`;
- the compressed embedding;
- the BM25 tokens of its summary.

With the `LOCAL` providers the pipeline makes no network calls. The other providers call their HTTP APIs through `httpx` with the API key from the config: OpenAI, Mistral and Cohere for embeddings, and OpenAI, Mistral, Gemini and Anthropic for summaries. A failed call is retried up to three times with backoff.

### External programs

Text extraction uses external programs when they are installed:

- **PDF**: `pdftotext`. If it fails or is missing, the raw bytes are decoded as UTF-8 instead.
- **DOCX**: read directly from the archive.
- **Images**: `tesseract`. If it is missing, a placeholder text is returned.
- **Audio**: either a local `whisper` program (`SttProvider.WHISPER_LOCAL`) or the OpenAI transcription API (`SttProvider.OPENAI_WHISPER`, which needs an API key).

### Vision extractor

Images and videos can also be described by a vision extractor: any `TextExtractor` given as `IngestConfig.vision`.

## What the package does not include

This is a library only. It has no server, no network client for a running server and no command-line tool.

It also does not store records. `IndexManager` takes any store object that has an `iter_all_records()` method, but no store is included.

The package ships no vision model. Ingesting a video raises `IngestError` unless `IngestConfig.vision` is set.