"""Postgres connections for the submissions store."""

from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg

from cip.config import Settings


APPLICATION_NAME = "contact-ingestion"


def get_connection(settings: Optional[Settings] = None) -> psycopg.Connection:
    """Open a connection tagged with the service name and a bounded connect timeout."""
    settings = settings or Settings()
    return psycopg.connect(
        settings.get_database_url(),
        application_name=APPLICATION_NAME,
        connect_timeout=settings.db_connect_timeout_seconds,
    )


@contextmanager
def db_cursor(settings: Optional[Settings] = None) -> Iterator[psycopg.Cursor]:
    """Cursor inside one transaction.

    The connection block commits when the body completes, rolls back when it
    raises, and closes the connection either way.
    """
    with get_connection(settings) as conn:
        with conn.cursor() as cursor:
            yield cursor
