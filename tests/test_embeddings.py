import pytest
from langchain_core.embeddings import Embeddings, FakeEmbeddings

from common.config import EmbeddingConfig
from common.errors import EmbeddingError
from models.embeddings import LangChainEmbedder, load_embedder


class _StaticEmbeddings(Embeddings):
    def __init__(self, vector=None, exc=None):
        self.vector = vector
        self.exc = exc

    def embed_documents(self, texts):
        return [self.embed_query(t) for t in texts]

    def embed_query(self, text):
        if self.exc:
            raise self.exc
        return self.vector


def test_returns_vector_of_configured_dimension():
    embedder = LangChainEmbedder(FakeEmbeddings(size=8), dimension=8)
    vec = embedder.embed("Check the 12V fuse.")
    assert len(vec) == 8
    assert all(isinstance(x, float) for x in vec)


@pytest.mark.parametrize("text", ["", "   \n"])
def test_empty_text_rejected(text):
    with pytest.raises(EmbeddingError):
        LangChainEmbedder(FakeEmbeddings(size=8)).embed(text)


def test_dimension_mismatch_rejected():
    with pytest.raises(EmbeddingError):
        LangChainEmbedder(FakeEmbeddings(size=8), dimension=1536).embed("fuse")


def test_empty_vector_rejected():
    with pytest.raises(EmbeddingError):
        LangChainEmbedder(_StaticEmbeddings(vector=[])).embed("fuse")


def test_provider_error_is_wrapped():
    with pytest.raises(EmbeddingError) as exc_info:
        LangChainEmbedder(_StaticEmbeddings(exc=RuntimeError("rate limited"))).embed("fuse")
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_unknown_provider_rejected_by_config():
    with pytest.raises(ValueError):
        EmbeddingConfig(provider="cohere")


def test_load_embedder_uses_ollama():
    pytest.importorskip("langchain_ollama")
    embedder = load_embedder(
        EmbeddingConfig(provider="ollama", model_name="nomic-embed-text", dimension=768)
    )
    assert isinstance(embedder, LangChainEmbedder)
    assert embedder.dimension == 768
