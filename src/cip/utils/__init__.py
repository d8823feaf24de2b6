"""Utility helpers."""

from cip.utils.logging import configure_logging, get_logger
from cip.utils.text import decode_base64_payload, is_blank, to_data_url

__all__ = [
    "configure_logging",
    "get_logger",
    "decode_base64_payload",
    "is_blank",
    "to_data_url",
]
