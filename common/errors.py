"""
Exception taxonomy shared by ingestion and query paths.

Empty normalizer input, documents that yield zero chunks, and queries that
retrieve nothing are ordinary return values, not errors.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ingestion.ingest_pipeline import IngestionJob


class RepairCopilotError(Exception):
    """Base class for all errors raised by this package."""


class EmbeddingError(RepairCopilotError):
    """The embedder got empty text or the provider returned no usable vector."""


class VectorIndexError(RepairCopilotError):
    """A vector index operation failed."""


class UpsertError(VectorIndexError):
    """Writing vectors to the index failed."""


class QueryError(RepairCopilotError):
    """Embedding the question or querying the index failed."""


class IngestionError(RepairCopilotError):
    """
    Ingestion of a single document was aborted.

    The originating exception is chained as ``__cause__``. ``job`` is the ledger
    at the time of failure, so callers can see which batches were already
    committed (they are not rolled back).
    """

    user_message = "The file could not be processed. Please try again later."

    def __init__(self, message: str, job: Optional["IngestionJob"] = None):
        super().__init__(message)
        self.job = job
