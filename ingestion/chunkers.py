from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

from common.config import ChunkingConfig, yaml_config
from common.logger import get_logger
from ingestion.cleaners import normalize_text
from ingestion.document_models import Chunk
from ingestion.hash_utils import chunk_id_for

log = get_logger(__name__)

_SENTENCE_END = re.compile(r"[.!?]\s")


def split_text(text: str, config: Optional[ChunkingConfig] = None) -> List[str]:
    """
    Split text into overlapping chunks for embedding.

    The text is normalized in ``structural`` mode first. Text no longer than
    ``max_chunk_size`` comes back as a single chunk, whatever its length. Longer
    text is walked with a cursor; each chunk ends at the best break point found
    inside the window (paragraph, then sentence, then word, then the raw limit),
    and the next chunk starts ``overlap_size`` characters before that end.
    Trimmed chunks shorter than ``min_chunk_size`` are dropped.
    """
    cfg = config or yaml_config.chunking

    cleaned = normalize_text(text, mode="structural")
    if not cleaned:
        log.warning("Empty text provided for chunking")
        return []

    if len(cleaned) <= cfg.max_chunk_size:
        return [cleaned]

    chunks: List[str] = []
    length = len(cleaned)
    cursor = 0

    while cursor < length:
        end = cursor + cfg.max_chunk_size
        if end < length:
            end = _find_break_point(cleaned, cursor, end, cfg)
        else:
            end = length

        piece = cleaned[cursor:end].strip()
        if piece and len(piece) >= cfg.min_chunk_size:
            chunks.append(piece)
        else:
            log.debug(
                "Dropped %d-char chunk at offset %d (min %d)",
                len(piece),
                cursor,
                cfg.min_chunk_size,
            )

        if end >= length:
            break

        next_cursor = end - cfg.overlap_size
        cursor = next_cursor if next_cursor > cursor else end

    log.info("Chunked %d characters into %d chunks", length, len(chunks))
    return chunks


def _find_break_point(text: str, start: int, end: int, cfg: ChunkingConfig) -> int:
    floor = start + cfg.min_chunk_size

    if cfg.preserve_paragraphs:
        pos = _last_paragraph_break(text, start, end)
        if pos is not None and pos > floor:
            return pos

    if cfg.preserve_sentences:
        pos = _last_sentence_break(text, start, end)
        if pos is not None and pos > floor:
            return pos

    pos = _last_word_break(text, start, end)
    if pos is not None and pos > floor:
        return pos

    return end


def _last_paragraph_break(text: str, start: int, end: int) -> Optional[int]:
    idx = text.rfind("\n\n", start, end)
    if idx != -1:
        return idx + 2
    idx = text.rfind("\n", start, end)
    if idx != -1:
        return idx + 1
    return None


def _last_sentence_break(text: str, start: int, end: int) -> Optional[int]:
    last = None
    for m in _SENTENCE_END.finditer(text, start, end):
        last = m
    return last.end() if last else None


def _last_word_break(text: str, start: int, end: int) -> Optional[int]:
    idx = text.rfind(" ", start, end)
    return idx + 1 if idx != -1 else None


def build_chunks(document_id: str, pieces: Sequence[str]) -> List[Chunk]:
    """Stamp positional identity onto split pieces, in order."""
    total = len(pieces)
    return [
        Chunk(
            chunk_id=chunk_id_for(document_id, i),
            text=piece,
            index=i,
            total_chunks=total,
        )
        for i, piece in enumerate(pieces)
    ]


def chunking_stats(text: str, chunks: Sequence[str]) -> Dict[str, Any]:
    lengths = [len(c) for c in chunks]
    return {
        "original_length": len(text),
        "chunk_count": len(chunks),
        "average_chunk_length": round(sum(lengths) / len(lengths)) if lengths else 0,
        "min_chunk_length": min(lengths) if lengths else 0,
        "max_chunk_length": max(lengths) if lengths else 0,
    }
