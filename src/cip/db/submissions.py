"""Submission record writes."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

import psycopg
from psycopg import Cursor
from psycopg.types.json import Jsonb

from cip.config import Settings
from cip.db.client import db_cursor
from cip.errors import PersistenceFailure
from cip.models import SubmissionRecord
from cip.utils.logging import get_logger


logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

COLUMNS = (
    "message",
    "audio_url",
    "audio_duration_seconds",
    "image_url",
    "contact_email",
    "contact_social",
    "location_precise",
    "location_coords",
    "location_city",
    "location_region",
    "location_country",
    "location_country_code",
    "location_source",
    "ip_address",
    "ip_is_vpn",
    "ip_is_datacenter",
    "ip_isp",
    "device_info",
    "timezone",
    "timezone_offset",
    "languages",
    "location_consistency_score",
    "trust_flags",
    "status",
    "admin_notes",
    "is_spam",
)


class SubmissionWriter(Protocol):
    """Durable commit point for one submission."""

    def insert(self, record: SubmissionRecord) -> str:
        """Persist the record and return its identifier."""


class PostgresSubmissionWriter:
    """Write submissions to the Postgres ``submissions`` table."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

    def insert(self, record: SubmissionRecord) -> str:
        try:
            with db_cursor(self.settings) as cursor:
                return insert_submission(cursor, record)
        except (psycopg.Error, ValueError) as exc:
            raise PersistenceFailure(str(exc)) from exc


def record_values(record: SubmissionRecord) -> list[object]:
    """Column values for a record, in ``COLUMNS`` order."""
    coords = record.location_coords
    device = record.device_info
    flags = sorted(record.trust.flags)
    return [
        record.message,
        record.audio_url,
        record.audio_duration_seconds,
        record.image_url,
        record.contact_email,
        record.contact_social,
        record.location_precise,
        Jsonb(coords.model_dump()) if coords is not None else None,
        record.location.city,
        record.location.region,
        record.location.country,
        record.location.country_code,
        record.location.source.value,
        record.origin.address,
        record.origin.is_vpn,
        record.origin.is_datacenter,
        record.origin.isp,
        Jsonb(device.model_dump()),
        record.timezone,
        record.timezone_offset,
        record.languages,
        record.trust.score,
        flags or None,
        record.status.value,
        record.admin_notes,
        record.is_spam,
    ]


def insert_submission(cursor: Cursor, record: SubmissionRecord) -> str:
    """Insert one submission and return its id."""
    placeholders = ",".join(["%s"] * len(COLUMNS))
    query = (
        f"insert into submissions ({', '.join(COLUMNS)}) values ({placeholders}) "
        "returning id"
    )
    cursor.execute(query, record_values(record))
    row = cursor.fetchone()
    if row is None:
        raise RuntimeError("insert returned no id")
    return str(row[0])


def apply_schema(cursor: Cursor, schema_path: Path = SCHEMA_PATH) -> None:
    """Create the submissions table and indexes if missing."""
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")
    cursor.execute(schema_path.read_text(encoding="utf-8"))
    logger.info("db.schema.applied path=%s", schema_path)
