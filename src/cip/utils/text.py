"""Text and data URL helpers."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional


_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,")


def is_blank(text: Optional[str]) -> bool:
    """Return True if text is missing or only whitespace."""
    return not text or not text.strip()


def strip_data_url_prefix(value: str) -> str:
    """Remove a ``data:<mime>;base64,`` prefix if present."""
    return _DATA_URL_PREFIX.sub("", value.strip(), count=1)


def decode_base64_payload(value: str) -> bytes:
    """Decode a base64 body or data URL into bytes.

    Raises ValueError on malformed input or an empty result.
    """
    cleaned = strip_data_url_prefix(value)
    try:
        data = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64 payload: {exc}") from exc
    if not data:
        raise ValueError("empty media payload")
    return data


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
