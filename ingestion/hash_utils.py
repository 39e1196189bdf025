import hashlib


def sha1_text(s: str) -> str:
    return hashlib.sha1(s.encode("utf-8")).hexdigest()


def document_id_for(source: str) -> str:
    """Stable id for a document, derived from its filename or URL."""
    return sha1_text(source)[:16]


def chunk_id_for(document_id: str, index: int) -> str:
    return f"{document_id}-chunk-{index}"
