import re
import unicodedata

MODES = ("aggressive", "structural")

_PAGE_OF = re.compile(r"page\s+\d+\s+of\s+\d+", re.IGNORECASE)
_NUMERIC_LINE = re.compile(r"^[^\S\n]*\d+[^\S\n]*(?:\n|$)", re.MULTILINE)


def _strip_pagination(s: str) -> str:
    # removing one artifact can expose another ("Page 3\n12\nof 9")
    while True:
        stripped = _NUMERIC_LINE.sub("", _PAGE_OF.sub("", s))
        if stripped == s:
            return s
        s = stripped


def normalize_text(s: str, mode: str = "structural") -> str:
    """
    Clean extracted manual text.

    ``aggressive`` collapses every whitespace run to one space (used right after
    PDF extraction). ``structural`` collapses horizontal whitespace only and keeps
    at most one blank line between paragraphs (used before chunk splitting).
    Both modes drop "Page N of M" markers and numeric-only lines.
    """
    if mode not in MODES:
        raise ValueError(f"Unsupported normalization mode: {mode}")
    if not s:
        return ""

    s = unicodedata.normalize("NFKC", s)
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    s = s.replace("\u00a0", " ")
    s = _strip_pagination(s)

    if mode == "aggressive":
        s = re.sub(r"\s+", " ", s)
    else:
        s = re.sub(r"[^\S\n]+", " ", s)
        s = re.sub(r" ?\n ?", "\n", s)
        s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()
