"""Device, locale and time zone signals sent with each submission."""

from __future__ import annotations

import locale
import os
import platform
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from cip import __version__
from cip.models import DeviceInfo


@dataclass(frozen=True)
class DeviceSignals:
    """Read-only snapshot of the sender's environment."""

    device_info: DeviceInfo
    timezone: Optional[str]
    timezone_offset: Optional[int]
    languages: list[str] = field(default_factory=list)


SignalsProvider = Callable[[], DeviceSignals]


def local_signals() -> DeviceSignals:
    """Snapshot the local machine the way a browser reports itself."""
    languages = local_languages()
    return DeviceSignals(
        device_info=DeviceInfo(
            user_agent=f"cip-client/{__version__} ({platform.platform()})",
            platform=platform.system() or None,
            screen_resolution=None,
            language=languages[0] if languages else None,
        ),
        timezone=local_timezone_name(),
        timezone_offset=local_timezone_offset(),
        languages=languages,
    )


def local_timezone_name() -> str:
    """Best-effort IANA zone name (``TZ``, then ``/etc/localtime``)."""
    env_tz = (os.environ.get("TZ") or "").lstrip(":").strip()
    if env_tz:
        return env_tz

    localtime = Path("/etc/localtime")
    try:
        target = str(localtime.resolve())
    except OSError:
        target = ""
    if "zoneinfo/" in target:
        return target.split("zoneinfo/", 1)[1]
    return "UTC"


def local_timezone_offset(now: Optional[datetime] = None) -> int:
    """Minutes behind UTC, matching the browser convention (UTC+1 -> -60)."""
    current = now or datetime.now().astimezone()
    offset = current.utcoffset()
    if offset is None:
        return 0
    return -int(offset.total_seconds() // 60)


def local_languages() -> list[str]:
    """Preferred language tags in BCP 47 form (``en_US.UTF-8`` -> ``en-US``)."""
    raw: list[str] = []
    language_env = os.environ.get("LANGUAGE")
    if language_env:
        raw.extend(language_env.split(":"))
    for name in ("LC_ALL", "LANG"):
        value = os.environ.get(name)
        if value:
            raw.append(value)
    try:
        current, _ = locale.getlocale()
    except ValueError:
        current = None
    if current:
        raw.append(current)

    tags: list[str] = []
    for value in raw:
        tag = to_language_tag(value)
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def to_language_tag(value: str) -> Optional[str]:
    """Convert a POSIX locale name to a language tag."""
    base = value.split(".", 1)[0].split("@", 1)[0].strip()
    if not base or base in {"C", "POSIX"}:
        return None
    return base.replace("_", "-")
