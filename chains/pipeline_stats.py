from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from common.config import GlobalYAMLConfig, yaml_config
from common.logger import get_logger
from vectorstore.base import VectorIndex

log = get_logger(__name__)


def index_stats(index: VectorIndex, config: Optional[GlobalYAMLConfig] = None) -> Dict[str, Any]:
    """
    Size of the vector index. An empty index reports the configured
    embedding dimension, since it has no vectors to read one from.
    """
    cfg = config or yaml_config
    stats = index.stats()
    return {
        "index_name": stats.name,
        "total_vectors": stats.total_vectors,
        "dimension": stats.dimension or cfg.embeddings.dimension,
    }


def pipeline_stats(index: VectorIndex, config: Optional[GlobalYAMLConfig] = None) -> Dict[str, Any]:
    """Index size plus the embedding and answer models in use."""
    cfg = config or yaml_config
    try:
        vector_index = index_stats(index, cfg)
    except Exception as e:
        log.error("Error getting pipeline stats: %s", e)
        raise

    return {
        "vector_index": vector_index,
        "models": {
            "embedding": {
                "provider": cfg.embeddings.provider,
                "model": cfg.embeddings.model_name,
                "dimension": cfg.embeddings.dimension,
            },
            "llm": {
                "provider": cfg.llm_qa.provider,
                "model": cfg.llm_qa.model_name,
                "temperature": cfg.llm_qa.temperature,
                "max_tokens": cfg.llm_qa.max_tokens,
            },
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
