"""Ingestion package."""

from cip.ingestion.gate import evaluate
from cip.ingestion.origin import client_address
from cip.ingestion.service import IngestionResult, IngestionService

__all__ = ["evaluate", "client_address", "IngestionResult", "IngestionService"]
