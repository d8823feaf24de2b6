"""Client network address derivation."""

from __future__ import annotations

from typing import Mapping, Optional


UNKNOWN_ADDRESS = "unknown"


def client_address(headers: Mapping[str, str], peer: Optional[str] = None) -> str:
    """Pick the sender address.

    First entry of ``X-Forwarded-For``, else ``X-Real-IP``, else the direct
    peer, else ``"unknown"``. Header lookups are case-insensitive.
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    forwarded_for = lowered.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = (lowered.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    if peer and peer.strip():
        return peer.strip()

    return UNKNOWN_ADDRESS
