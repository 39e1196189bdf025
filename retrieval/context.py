from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from vectorstore.base import RetrievedMatch


@dataclass(frozen=True)
class QueryContext:
    context_blocks: Tuple[str, ...]
    sources: Tuple[str, ...]
    matches: Tuple[RetrievedMatch, ...] = ()
    used_fallback: bool = False

    @property
    def found(self) -> bool:
        return bool(self.matches)


# returned when even fallback retrieval found nothing
NO_CONTEXT = QueryContext(context_blocks=(), sources=())


def format_context_block(position: int, match: RetrievedMatch) -> str:
    meta = match.metadata
    block = (
        f"Context {position} (Score: {match.score:.3f}):\n"
        f"Source: {meta.get('source')}\n"
        f"Brand: {meta.get('brand') or 'Unknown'}\n"
        f"Component: {meta.get('component') or 'Unknown'}\n"
        f"Manual Type: {meta.get('manualType')}\n"
        f"Page: {meta.get('pageNumber') or 'Unknown'}"
    )
    text = meta.get("text")
    if text:
        block += f"\nContent:\n{text}"
    return block


def source_label(meta: Dict[str, Any]) -> str:
    label = str(meta.get("source"))
    if meta.get("brand"):
        label += f" - {meta['brand']}"
    if meta.get("component"):
        label += f" ({meta['component']})"
    return label


def assemble_context(
    matches: Sequence[RetrievedMatch], used_fallback: bool = False
) -> QueryContext:
    """
    Render one context block per match (1-based, in input order) and the
    deduplicated source labels in first-seen order.
    """
    if not matches:
        return NO_CONTEXT

    blocks = [format_context_block(i, m) for i, m in enumerate(matches, start=1)]

    sources: List[str] = []
    seen = set()
    for m in matches:
        label = source_label(m.metadata)
        if label not in seen:
            seen.add(label)
            sources.append(label)

    return QueryContext(
        context_blocks=tuple(blocks),
        sources=tuple(sources),
        matches=tuple(matches),
        used_fallback=used_fallback,
    )
