from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ingestion.hash_utils import document_id_for

MANUAL_TYPES = ("service", "owner", "parts", "wiring")

# ten chunks per notional page
CHUNKS_PER_PAGE = 10


def page_number_for(chunk_index: int) -> int:
    return chunk_index // CHUNKS_PER_PAGE + 1


@dataclass(frozen=True)
class ManualDocument:
    source: str  # original filename or URL
    text: str  # raw extracted text
    manual_type: str = "service"
    brand: Optional[str] = None
    component: Optional[str] = None
    file_size: Optional[int] = None  # bytes; defaults to the UTF-8 size of text
    document_id: str = field(default="")

    def __post_init__(self):
        if self.manual_type not in MANUAL_TYPES:
            raise ValueError(
                f"manual_type must be one of {', '.join(MANUAL_TYPES)}, "
                f"got {self.manual_type!r}"
            )
        if not self.document_id:
            object.__setattr__(self, "document_id", document_id_for(self.source))
        if self.file_size is None:
            object.__setattr__(self, "file_size", len(self.text.encode("utf-8")))


@dataclass(frozen=True)
class Chunk:
    chunk_id: str  # "<document_id>-chunk-<index>"
    text: str
    index: int
    total_chunks: int

    @property
    def page_number(self) -> int:
        return page_number_for(self.index)


class ChunkMetadata(BaseModel):
    """Metadata stored next to each vector. Serialised with camelCase keys."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    brand: Optional[str] = None
    component: Optional[str] = None
    manual_type: str
    source: str
    chunk_index: int
    total_chunks: int
    created_at: str
    file_size: Optional[int] = None
    page_number: Optional[int] = None
    text: Optional[str] = None

    def to_index_metadata(self) -> Dict[str, Any]:
        # vector stores reject null metadata values
        return self.model_dump(by_alias=True, exclude_none=True)
