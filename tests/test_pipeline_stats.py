import uuid

import chromadb
import pytest

from chains.pipeline_stats import index_stats, pipeline_stats
from common.config import EmbeddingConfig, GlobalYAMLConfig, LLMConfig
from common.errors import VectorIndexError
from vectorstore.base import IndexEntry
from vectorstore.chroma_store import ChromaVectorIndex
from vectorstore.memory_store import InMemoryVectorIndex


def _entries(n, dim=4):
    return [IndexEntry(f"doc-chunk-{i}", [float(i + 1)] * dim, {"brand": "Dometic"}) for i in range(n)]


def test_memory_index_stats():
    index = InMemoryVectorIndex(name="manuals")
    assert index.stats().total_vectors == 0
    assert index.stats().dimension is None

    index.upsert(_entries(3))
    stats = index.stats()
    assert (stats.name, stats.total_vectors, stats.dimension) == ("manuals", 3, 4)


def test_chroma_index_stats():
    name = f"test-{uuid.uuid4().hex[:8]}"
    index = ChromaVectorIndex(collection_name=name, client=chromadb.EphemeralClient())
    assert index.stats().total_vectors == 0
    assert index.stats().dimension is None

    index.upsert(_entries(5, dim=3))
    stats = index.stats()
    assert (stats.name, stats.total_vectors, stats.dimension) == (name, 5, 3)


def test_empty_index_reports_configured_dimension():
    cfg = GlobalYAMLConfig(embeddings=EmbeddingConfig(dimension=768))
    assert index_stats(InMemoryVectorIndex(), cfg) == {
        "index_name": "in-memory",
        "total_vectors": 0,
        "dimension": 768,
    }


def test_pipeline_stats_reports_index_and_models():
    index = InMemoryVectorIndex(name="rv-repair-manuals")
    index.upsert(_entries(2, dim=8))
    cfg = GlobalYAMLConfig(llm_qa=LLMConfig(provider="ollama", model_name="llama3"))

    stats = pipeline_stats(index, cfg)

    assert stats["vector_index"] == {
        "index_name": "rv-repair-manuals",
        "total_vectors": 2,
        "dimension": 8,
    }
    assert stats["models"]["embedding"]["model"] == "text-embedding-ada-002"
    assert stats["models"]["llm"] == {
        "provider": "ollama",
        "model": "llama3",
        "temperature": 0.7,
        "max_tokens": 2000,
    }
    assert "timestamp" in stats


def test_pipeline_stats_propagates_index_errors():
    class BrokenIndex(InMemoryVectorIndex):
        def stats(self):
            raise VectorIndexError("index unreachable")

    with pytest.raises(VectorIndexError):
        pipeline_stats(BrokenIndex(), GlobalYAMLConfig())
