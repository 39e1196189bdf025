from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class IndexEntry:
    id: str
    values: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexStats:
    name: str
    total_vectors: int
    dimension: Optional[int] = None  # None until the first vector is stored


@dataclass(frozen=True)
class RetrievedMatch:
    id: str
    score: float  # cosine similarity in [0, 1]
    metadata: Dict[str, Any] = field(default_factory=dict)


class VectorIndex(Protocol):
    """
    Vector store capability used by ingestion and querying.

    ``where`` filters are plain equality maps on metadata keys,
    e.g. ``{"brand": "Dometic", "manualType": "service"}``.
    """

    def upsert(self, entries: Sequence[IndexEntry]) -> None: ...

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        where: Optional[Dict[str, Any]] = None,
    ) -> List[RetrievedMatch]:
        """Return up to ``top_k`` matches sorted by descending score."""
        ...

    def delete_by_filter(self, where: Dict[str, Any]) -> None: ...

    def stats(self) -> IndexStats: ...
