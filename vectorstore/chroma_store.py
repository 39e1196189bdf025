from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import chromadb
from tenacity import retry, stop_after_attempt, wait_exponential

from common.config import VectorStoreConfig, yaml_config
from common.errors import UpsertError, VectorIndexError
from common.logger import get_logger
from vectorstore.base import IndexEntry, IndexStats, RetrievedMatch

log = get_logger(__name__)


def to_chroma_where(where: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Translate an equality filter into Chroma's 'where' syntax.
    More than one condition has to be wrapped in an $and.
    """
    if not where:
        return None
    conditions = [{k: {"$eq": v}} for k, v in where.items()]
    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}


class ChromaVectorIndex:
    def __init__(
        self,
        persist_dir: Path | str | None = None,
        collection_name: str | None = None,
        client: Optional[Any] = None,
        config: Optional[VectorStoreConfig] = None,
    ):
        """
        Vector index backed by a Chroma collection using cosine distance.
        Vectors are computed by the caller; Chroma never embeds anything here.
        Uses config/config.yaml for defaults.
        """
        cfg = config or yaml_config.vectorstore
        self.persist_dir = str(persist_dir or cfg.persist_dir)
        self.collection_name = collection_name or cfg.collection
        self._client = client or chromadb.PersistentClient(path=self.persist_dir)
        self._collection = self._client.get_or_create_collection(
            name=self.collection_name, metadata={"hnsw:space": "cosine"}
        )
        self._upsert_with_retry = retry(
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(cfg.upsert_attempts),
            reraise=True,
        )(self._upsert_once)

    def _upsert_once(self, entries: Sequence[IndexEntry]) -> None:
        self._collection.upsert(
            ids=[e.id for e in entries],
            embeddings=[list(e.values) for e in entries],
            metadatas=[dict(e.metadata) for e in entries],
        )

    def upsert(self, entries: Sequence[IndexEntry]) -> None:
        if not entries:
            return
        try:
            self._upsert_with_retry(entries)
        except Exception as e:
            raise UpsertError(f"Failed to upsert vectors: {e}") from e
        log.info(
            "Upserted %d vectors into collection '%s'",
            len(entries),
            self.collection_name,
        )

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        where: Optional[Dict[str, Any]] = None,
    ) -> List[RetrievedMatch]:
        try:
            res = self._collection.query(
                query_embeddings=[list(vector)],
                n_results=top_k,
                where=to_chroma_where(where),
                include=["metadatas", "distances"],
            )
        except Exception as e:
            raise VectorIndexError(f"Failed to search vectors: {e}") from e

        ids = (res.get("ids") or [[]])[0]
        distances = (res.get("distances") or [[]])[0]
        metadatas = (res.get("metadatas") or [[]])[0]

        matches: List[RetrievedMatch] = []
        for cid, dist, meta in zip(ids, distances, metadatas):
            # cosine distance = 1 - cosine similarity
            score = min(max(1.0 - float(dist), 0.0), 1.0)
            matches.append(RetrievedMatch(id=cid, score=score, metadata=dict(meta or {})))
        log.debug("Found %d search results", len(matches))
        return matches

    def delete_by_filter(self, where: Dict[str, Any]) -> None:
        try:
            self._collection.delete(where=to_chroma_where(where))
        except Exception as e:
            raise VectorIndexError(f"Failed to delete vectors: {e}") from e
        log.info("Deleted vectors matching %s from '%s'", where, self.collection_name)

    def stats(self) -> IndexStats:
        try:
            total = self._collection.count()
            sample = self._collection.get(limit=1, include=["embeddings"])
        except Exception as e:
            raise VectorIndexError(f"Failed to get index stats: {e}") from e

        # the collection takes its dimension from the first stored vector
        embeddings = sample.get("embeddings")
        dimension = len(embeddings[0]) if embeddings is not None and len(embeddings) else None
        return IndexStats(name=self.collection_name, total_vectors=total, dimension=dimension)
