from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

import orjson
from tqdm import tqdm

from common.config import GlobalYAMLConfig, yaml_config
from common.errors import IngestionError
from common.logger import get_logger
from ingestion.chunkers import build_chunks, chunking_stats, split_text
from ingestion.cleaners import normalize_text
from ingestion.document_models import Chunk, ChunkMetadata, ManualDocument
from models.embeddings import Embedder
from retrieval.filters import build_metadata_filter
from vectorstore.base import IndexEntry, VectorIndex

log = get_logger(__name__)


class IngestionState(str, Enum):
    RECEIVED = "received"
    NORMALIZED = "normalized"
    SPLIT = "split"
    EMBEDDING = "embedding"
    UPSERTED = "upserted"
    DONE = "done"
    FAILED = "failed"


@dataclass
class IngestionJob:
    """
    Per-document ledger. Batches listed in ``committed_batches`` are stored in
    the index even when the job ends up FAILED.
    """

    document_id: str
    source: str
    state: IngestionState = IngestionState.RECEIVED
    total_chunks: int = 0
    embedded_chunks: int = 0
    total_batches: int = 0
    committed_batches: List[int] = field(default_factory=list)
    failed_batch: Optional[int] = None
    error: Optional[str] = None

    def advance(self, state: IngestionState) -> None:
        log.debug("%s: %s -> %s", self.source, self.state.value, state.value)
        self.state = state

    @property
    def pending_batches(self) -> List[int]:
        return [b for b in range(self.total_batches) if b not in self.committed_batches]


@dataclass(frozen=True)
class IngestionResult:
    chunks_stored: int
    document_id: str
    job: IngestionJob


def _batched(entries: Sequence[IndexEntry], size: int) -> List[Sequence[IndexEntry]]:
    return [entries[i : i + size] for i in range(0, len(entries), size)]


def _chunk_metadata(
    document: ManualDocument, chunk: Chunk, created_at: str, store_text: bool
) -> ChunkMetadata:
    return ChunkMetadata(
        brand=document.brand,
        component=document.component,
        manual_type=document.manual_type,
        source=document.source,
        chunk_index=chunk.index,
        total_chunks=chunk.total_chunks,
        created_at=created_at,
        file_size=document.file_size,
        page_number=chunk.page_number,
        text=chunk.text if store_text else None,
    )


def ingest_document(
    document: ManualDocument,
    embedder: Embedder,
    index: VectorIndex,
    config: Optional[GlobalYAMLConfig] = None,
    *,
    show_progress: bool = False,
    manifest_dir: Path | None = None,
) -> IngestionResult:
    """
    Ingest one manual into the vector index.
    - Normalizes (aggressive)
    - Chunks
    - Embeds each chunk, one at a time, in order
    - Upserts in ordered batches with a short pause between batches
    - Optionally writes a manifest of the job ledger

    Any failure aborts the document and raises IngestionError chained to the
    cause. Batches committed before the failure are not rolled back.
    """
    cfg = config or yaml_config
    job = IngestionJob(document_id=document.document_id, source=document.source)
    chunks: List[Chunk] = []

    log.info(
        "Ingesting %s (brand=%s component=%s type=%s size=%s)",
        document.source,
        document.brand,
        document.component,
        document.manual_type,
        document.file_size,
    )
    try:
        # 1) Normalize
        text = normalize_text(document.text, mode="aggressive")
        job.advance(IngestionState.NORMALIZED)

        # 2) Split
        pieces = split_text(text, cfg.chunking)
        chunks = build_chunks(document.document_id, pieces)
        job.total_chunks = len(chunks)
        job.advance(IngestionState.SPLIT)
        log.debug("Chunking stats: %s", chunking_stats(text, pieces))

        if not chunks:
            log.warning("No chunks produced for %s; nothing to ingest", document.source)
            job.advance(IngestionState.DONE)
            return IngestionResult(0, document.document_id, job)

        # 3) Embed sequentially
        job.advance(IngestionState.EMBEDDING)
        created_at = datetime.now(timezone.utc).isoformat()
        entries: List[IndexEntry] = []
        for chunk in tqdm(
            chunks,
            desc=f"Embedding {document.source}",
            unit="chunk",
            disable=not show_progress,
        ):
            vector = embedder.embed(chunk.text)
            meta = _chunk_metadata(
                document, chunk, created_at, cfg.ingestion.store_chunk_text
            )
            entries.append(
                IndexEntry(
                    id=chunk.chunk_id, values=vector, metadata=meta.to_index_metadata()
                )
            )
            job.embedded_chunks += 1

        # 4) Upsert in batches
        batches = _batched(entries, cfg.ingestion.batch_size)
        job.total_batches = len(batches)
        for b, batch in enumerate(batches):
            if b > 0 and cfg.ingestion.batch_delay_seconds > 0:
                time.sleep(cfg.ingestion.batch_delay_seconds)
            job.failed_batch = b
            index.upsert(batch)
            job.failed_batch = None
            job.committed_batches.append(b)
            log.debug("Upserted batch %d/%d", b + 1, len(batches))
        job.advance(IngestionState.UPSERTED)

    except Exception as e:
        job.error = str(e)
        job.advance(IngestionState.FAILED)
        log.error(
            "Failed to ingest %s after %d/%d batches: %s",
            document.source,
            len(job.committed_batches),
            job.total_batches,
            e,
        )
        _try_write_manifest(job, chunks, manifest_dir)
        raise IngestionError(f"Failed to ingest {document.source}: {e}", job=job) from e

    job.advance(IngestionState.DONE)
    log.info("Stored %d vectors for %s", len(entries), document.source)
    _try_write_manifest(job, chunks, manifest_dir)
    return IngestionResult(len(entries), document.document_id, job)


def _try_write_manifest(
    job: IngestionJob, chunks: Sequence[Chunk], out_dir: Path | None
) -> Optional[Path]:
    # write failures are logged, never raised
    if out_dir is None:
        return None
    try:
        return write_manifest(job, chunks, out_dir)
    except OSError as e:
        log.warning("Could not write manifest for %s to %s: %s", job.source, out_dir, e)
        return None


def write_manifest(job: IngestionJob, chunks: Sequence[Chunk], out_dir: Path) -> Path:
    """Write the job ledger and chunk listing as JSON (for audit/debug)."""
    manifest = {
        "job": {
            **asdict(job),
            "state": job.state.value,
            "pending_batches": job.pending_batches,
        },
        "chunks": [
            {
                "chunk_id": c.chunk_id,
                "chunk_index": c.index,
                "page": c.page_number,
                "len": len(c.text),
            }
            for c in chunks
        ],
    }
    out = Path(out_dir) / f"manifest_{job.document_id}.json"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(orjson.dumps(manifest, option=orjson.OPT_INDENT_2))
    log.info("Wrote manifest to %s", out)
    return out


def clear_manuals(
    index: VectorIndex,
    brand: Optional[str] = None,
    component: Optional[str] = None,
    manual_type: Optional[str] = None,
) -> None:
    """Delete stored vectors for a brand/component/manual type."""
    where = build_metadata_filter(brand, component, manual_type)
    if not where:
        raise ValueError(
            "At least one filter parameter (brand, component, or manual_type) is required"
        )
    log.info("Clearing vectors with filter: %s", where)
    index.delete_by_filter(where)
