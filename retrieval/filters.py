from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from common.logger import get_logger
from vectorstore.base import RetrievedMatch

log = get_logger(__name__)


def build_metadata_filter(
    brand: Optional[str] = None,
    component: Optional[str] = None,
    manual_type: Optional[str] = None,  # "service" | "owner" | "parts" | "wiring"
) -> Dict[str, Any]:
    """
    Construct an equality filter over the metadata keys written during ingestion:
      - brand
      - component
      - manualType
    Returns an empty dict when no filter applies.
    """
    where: Dict[str, Any] = {}
    if brand:
        where["brand"] = brand
    if component:
        where["component"] = component
    if manual_type:
        where["manualType"] = manual_type
    return where


def filter_matches(
    matches: Sequence[RetrievedMatch],
    min_score: float = 0.70,
    fallback_count: int = 3,
) -> List[RetrievedMatch]:
    """
    Keep matches scoring at least ``min_score``, in the order given.

    When none qualifies, fall back to the first ``fallback_count`` matches of the
    unfiltered input regardless of score. Matches are expected to arrive sorted by
    descending score and are never re-sorted or deduplicated here.
    """
    relevant = [m for m in matches if m.score >= min_score]
    if relevant:
        return relevant
    if matches:
        log.warning(
            "No results met minimum relevance threshold %.2f; using top %d",
            min_score,
            min(fallback_count, len(matches)),
        )
    return list(matches[:fallback_count])


def used_fallback(matches: Sequence[RetrievedMatch], min_score: float = 0.70) -> bool:
    """True when ``filter_matches`` would return fallback matches for this input."""
    return bool(matches) and not any(m.score >= min_score for m in matches)
