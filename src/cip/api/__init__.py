"""HTTP API."""

from cip.api.app import create_app, get_ingestion_service

__all__ = ["create_app", "get_ingestion_service"]
