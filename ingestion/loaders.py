from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from pypdf import PdfReader

from common.config import yaml_config
from common.logger import get_logger
from ingestion.cleaners import normalize_text
from ingestion.document_models import ManualDocument

log = get_logger(__name__)


def metadata_from_filename(path: Path) -> Tuple[Optional[str], Optional[str]]:
    """Guess (brand, component) from names like 'dometic-refrigerator-rm2652.pdf'."""
    parts = [p for p in path.stem.split("-") if p]
    brand = parts[0] if parts else None
    component = parts[1] if len(parts) > 1 else None
    return brand, component


def extract_pdf_text(path: Path, max_pages: int | None = None) -> str:
    reader = PdfReader(str(path))
    pages = reader.pages
    # Limit by argument, then config, else all pages
    if max_pages is None:
        max_pages = yaml_config.app.max_pdf_pages
    if max_pages is None:
        max_pages = len(pages)
    texts = [page.extract_text() or "" for page in pages[:max_pages]]
    return "\n".join(texts)


def load_manual_pdf(
    path: Path | str,
    *,
    brand: Optional[str] = None,
    component: Optional[str] = None,
    manual_type: str = "service",
    max_pages: int | None = None,
) -> ManualDocument:
    """Load a PDF service manual into a ManualDocument with cleaned text."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"PDF not found: {path}")
    if path.suffix.lower() != ".pdf":
        raise ValueError(f"File is not a PDF: {path}")

    if not brand or not component:
        guessed_brand, guessed_component = metadata_from_filename(path)
        brand = brand or guessed_brand
        component = component or guessed_component

    raw = extract_pdf_text(path, max_pages=max_pages)
    text = normalize_text(raw, mode="aggressive")
    if not text:
        log.warning("No text content extracted from PDF: %s", path)

    log.debug(
        "Parsed PDF %s: %d chars (raw %d)", path.name, len(text), len(raw)
    )
    return ManualDocument(
        source=path.name,
        text=text,
        manual_type=manual_type,
        brand=brand,
        component=component,
        file_size=path.stat().st_size,
    )
