"""Utility functions."""

import hashlib
import re
import secrets
import time
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urljoin, urlparse

from content_migration.core.constants import UNKNOWN_FORMAT


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    """Generate a unique record id such as ``img-1700000000000-k3j9a8x0q``."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


def resolve_url(href: str, base_url: str) -> str:
    """Resolve ``href`` against ``base_url``, returning ``href`` unchanged if that fails."""
    try:
        return urljoin(base_url, href)
    except ValueError:
        return href


def slug_from_url(url: str) -> str:
    """Derive a page slug from its path: ``/about/team/`` becomes ``about-team``."""
    path = urlparse(url).path
    if path in ("", "/"):
        return "home"
    return path.strip("/").replace("/", "-")


def get_file_extension(url: str) -> str:
    """Lower-cased extension of the URL's last path segment."""
    try:
        path = urlparse(url).path
    except ValueError:
        return UNKNOWN_FORMAT
    last_segment = path.rsplit("/", 1)[-1]
    if "." not in last_segment:
        return UNKNOWN_FORMAT
    return last_segment.rsplit(".", 1)[-1].lower() or UNKNOWN_FORMAT


def compute_content_hash(content: str | bytes) -> str:
    """Compute SHA256 hash of content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def normalize_text(text: str) -> str:
    """Normalize whitespace in text."""
    # Replace multiple whitespace with single space
    text = re.sub(r"\s+", " ", text)
    # Remove leading/trailing whitespace
    return text.strip()


def parse_dimension(value: Optional[str]) -> Optional[int]:
    """Parse an ``<img>`` width/height attribute; zero or garbage becomes None."""
    if not value:
        return None
    match = re.match(r"\s*(\d+)", value)
    if not match:
        return None
    return int(match.group(1)) or None
