import re
import unicodedata


_BIRTH_CLAUSE_RE = re.compile(r"\s*\bnat[oa](?:/[oa])?\s+a\b.*$", re.IGNORECASE | re.DOTALL)
_UNKNOWN_FRAGMENT_RE = re.compile(r"\bUnknown\s+\S+", re.IGNORECASE)
_TIMEOUT_MARKER_RE = re.compile(r"Timeout-Pending", re.IGNORECASE)


def strip_accents(value: str) -> str:
    value = unicodedata.normalize("NFKD", str(value or ""))
    return "".join(ch for ch in value if not unicodedata.combining(ch))


def collapse_spaces(value: str) -> str:
    return re.sub(r"\s+", " ", str(value or "")).strip()


def compact_upper(value: str) -> str:
    """Uppercase and drop every whitespace character (``"San Mauro " -> "SANMAURO"``)."""
    return re.sub(r"\s+", "", str(value or "")).upper()


def clean_owner_name(value: object) -> str:
    if value is None or not isinstance(value, str):
        return ""
    text = _UNKNOWN_FRAGMENT_RE.sub(" ", value)
    text = _TIMEOUT_MARKER_RE.sub(" ", text)
    text = _BIRTH_CLAUSE_RE.sub("", text)
    text = text.split(";", 1)[0]
    return collapse_spaces(text)
