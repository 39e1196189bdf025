from __future__ import annotations

from typing import List, Optional, Protocol

from langchain_core.embeddings import Embeddings

from common.config import EmbeddingConfig, secrets, yaml_config
from common.errors import EmbeddingError
from common.logger import get_logger

log = get_logger(__name__)


class Embedder(Protocol):
    def embed(self, text: str) -> List[float]: ...


class LangChainEmbedder:
    """Adapts any LangChain ``Embeddings`` implementation to the ``Embedder`` contract."""

    def __init__(self, embeddings: Embeddings, dimension: Optional[int] = None):
        self._embeddings = embeddings
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        log.debug("Generating embeddings for text of length: %d", len(text))
        try:
            vector = self._embeddings.embed_query(text)
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embeddings: {e}") from e

        if not vector:
            raise EmbeddingError("No embeddings returned by the provider")
        if self.dimension is not None and len(vector) != self.dimension:
            raise EmbeddingError(
                f"Expected an embedding of dimension {self.dimension}, got {len(vector)}"
            )
        return list(vector)


def load_embedder(cfg: Optional[EmbeddingConfig] = None) -> LangChainEmbedder:
    """
    Build the embedder configured in the ``embeddings`` section.
    Provider clients are imported lazily so only the configured one is needed.
    """
    cfg = cfg or yaml_config.embeddings

    if cfg.provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        kwargs = {}
        if secrets.openai_api_key:
            kwargs["api_key"] = secrets.openai_api_key
        embeddings = OpenAIEmbeddings(
            model=cfg.model_name,
            max_retries=cfg.max_retries,
            request_timeout=cfg.timeout,
            **kwargs,
        )
    elif cfg.provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        embeddings = HuggingFaceEmbeddings(model_name=cfg.model_name)
    elif cfg.provider == "ollama":
        from langchain_ollama import OllamaEmbeddings

        kwargs = {"base_url": secrets.ollama_base_url} if secrets.ollama_base_url else {}
        embeddings = OllamaEmbeddings(model=cfg.model_name, **kwargs)
    else:
        raise ValueError(f"Unsupported embedding provider: {cfg.provider}")

    log.info("Embedder initialized: %s/%s", cfg.provider, cfg.model_name)
    return LangChainEmbedder(embeddings, dimension=cfg.dimension)
