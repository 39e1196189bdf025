"""In-process vector index for tests and local experiments."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from common.logger import get_logger
from vectorstore.base import IndexEntry, IndexStats, RetrievedMatch

log = get_logger(__name__)


def _matches(metadata: Dict[str, Any], where: Optional[Dict[str, Any]]) -> bool:
    if not where:
        return True
    return all(metadata.get(k) == v for k, v in where.items())


class InMemoryVectorIndex:
    def __init__(self, dimension: int | None = None, name: str = "in-memory"):
        self.name = name
        self.dimension = dimension
        self._entries: Dict[str, IndexEntry] = {}
        self.upsert_calls = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> Optional[IndexEntry]:
        return self._entries.get(entry_id)

    def upsert(self, entries: Sequence[IndexEntry]) -> None:
        for e in entries:
            if self.dimension is not None and len(e.values) != self.dimension:
                raise ValueError(
                    f"Vector {e.id} has dimension {len(e.values)}, "
                    f"expected {self.dimension}"
                )
            self._entries[e.id] = e
        self.upsert_calls += 1
        log.debug("Upserted %d vectors (%d total)", len(entries), len(self._entries))

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        where: Optional[Dict[str, Any]] = None,
    ) -> List[RetrievedMatch]:
        candidates = [e for e in self._entries.values() if _matches(e.metadata, where)]
        if not candidates or top_k <= 0:
            return []

        q = np.asarray(vector, dtype=float)
        mat = np.asarray([e.values for e in candidates], dtype=float)
        norms = np.linalg.norm(mat, axis=1) * np.linalg.norm(q)
        sims = np.divide(mat @ q, norms, out=np.zeros(len(candidates)), where=norms > 0)
        scores = np.clip(sims, 0.0, 1.0)

        order = np.argsort(-scores, kind="stable")[:top_k]
        return [
            RetrievedMatch(
                id=candidates[i].id,
                score=float(scores[i]),
                metadata=dict(candidates[i].metadata),
            )
            for i in order
        ]

    def delete_by_filter(self, where: Dict[str, Any]) -> None:
        doomed = [k for k, e in self._entries.items() if _matches(e.metadata, where)]
        for k in doomed:
            del self._entries[k]
        log.info("Deleted %d vectors matching %s", len(doomed), where)

    def stats(self) -> IndexStats:
        dimension = self.dimension
        if dimension is None and self._entries:
            dimension = len(next(iter(self._entries.values())).values)
        return IndexStats(name=self.name, total_vectors=len(self._entries), dimension=dimension)
