"""Input sanitization utilities."""
import re
import unicodedata
from typing import Optional

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_SLUG_DASH_RE = re.compile(r"[\s_-]+")


def clean_text(value: Optional[str], max_length: int = 1000) -> Optional[str]:
    """
    Strip surrounding whitespace and truncate.

    Blank strings become None so optional columns stay NULL.
    """
    if value is None:
        return None

    value = value.strip()
    if not value:
        return None

    return value[:max_length]


def sanitize_email(email: Optional[str]) -> str:
    """Normalize an email to lower case and validate its shape."""
    if email is None:
        raise ValueError("Email cannot be None")

    email = email.strip().lower()

    if not email:
        raise ValueError("Email cannot be empty")

    if not _EMAIL_RE.match(email):
        raise ValueError("Invalid email format")

    return email


def slugify(text: str) -> str:
    """
    Convert a catalog name to a URL-friendly ASCII slug.

    Examples:
        "Padrón" -> "padron"
        "Romeo y Julieta" -> "romeo-y-julieta"
        "1964 Anniversary Series" -> "1964-anniversary-series"
    """
    text = unicodedata.normalize("NFKD", text.strip().lower())
    text = text.encode("ascii", "ignore").decode("ascii")
    text = _SLUG_STRIP_RE.sub("", text)
    text = _SLUG_DASH_RE.sub("-", text)
    return text.strip("-")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user search text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
