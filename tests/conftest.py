import re
import zlib

import pytest

from common.config import GlobalYAMLConfig, IngestionConfig
from common.errors import EmbeddingError, UpsertError
from vectorstore.base import IndexStats, RetrievedMatch
from vectorstore.memory_store import InMemoryVectorIndex


class FakeEmbedder:
    """Bag-of-words hashing embedder; identical texts get identical vectors."""

    def __init__(self, dim: int = 16, fail_on: int | None = None):
        self.dim = dim
        self.fail_on = fail_on
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise EmbeddingError("provider unavailable")
        vec = [0.0] * self.dim
        for tok in re.findall(r"\w+", text.lower()):
            vec[zlib.crc32(tok.encode("utf-8")) % self.dim] += 1.0
        return vec


class FlakyIndex(InMemoryVectorIndex):
    """Fails on the n-th upsert call."""

    def __init__(self, fail_on: int):
        super().__init__()
        self.fail_on = fail_on
        self._attempts = 0

    def upsert(self, entries):
        self._attempts += 1
        if self._attempts == self.fail_on:
            raise UpsertError("index unavailable")
        super().upsert(entries)


class StubIndex:
    """Returns canned matches and records the query it received."""

    def __init__(self, matches):
        self.matches = list(matches)
        self.queries = []

    def upsert(self, entries):
        raise AssertionError("upsert not expected")

    def query(self, vector, top_k, where=None):
        self.queries.append({"vector": vector, "top_k": top_k, "where": where})
        return self.matches[:top_k]

    def delete_by_filter(self, where):
        raise AssertionError("delete not expected")

    def stats(self):
        return IndexStats(name="stub", total_vectors=len(self.matches))


def make_match(score, source="manual.pdf", brand="Dometic", component="Refrigerator", **extra):
    meta = {
        "source": source,
        "brand": brand,
        "component": component,
        "manualType": "service",
        "pageNumber": 1,
        **extra,
    }
    meta = {k: v for k, v in meta.items() if v is not None}
    return RetrievedMatch(id=f"{source}-{score}", score=score, metadata=meta)


def sentences(n: int, start: int = 0) -> str:
    return " ".join(
        f"Step {i} checks the fuse on circuit {i} before the pump test."
        for i in range(start, start + n)
    )


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def index():
    return InMemoryVectorIndex()


@pytest.fixture
def config():
    return GlobalYAMLConfig(ingestion=IngestionConfig(batch_delay_seconds=0))
