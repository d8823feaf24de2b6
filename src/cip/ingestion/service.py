"""Ingestion service: the single trust boundary for contact submissions."""

from __future__ import annotations

import functools
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, TypeVar

from cip.config import Settings
from cip.db.submissions import PostgresSubmissionWriter, SubmissionWriter
from cip.geo import GeoResult, lookup_network, reverse_geocode
from cip.ingestion.gate import RejectDecision, evaluate
from cip.models import (
    FinalLocation,
    LocationSource,
    LocationSummary,
    NetworkOrigin,
    Provenance,
    SubmissionAck,
    SubmissionError,
    SubmissionPayload,
    SubmissionRecord,
)
from cip.storage.media import MediaKind, MediaStore, StoredMedia
from cip.trust.scorer import score_consistency, with_network_flags
from cip.utils.logging import get_logger


logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to save submission. Please try again."

T = TypeVar("T")

NetworkLookup = Callable[[str], GeoResult]
ReverseLookup = Callable[[float, float], GeoResult]


class MediaUploader(Protocol):
    def store(self, kind: MediaKind, encoded: str) -> StoredMedia:
        """Upload one payload; failures come back as a failed StoredMedia."""


@dataclass(frozen=True)
class IngestionResult:
    """HTTP status plus response body."""

    status_code: int
    body: SubmissionAck | SubmissionError

    @property
    def success(self) -> bool:
        return isinstance(self.body, SubmissionAck)


@dataclass(frozen=True)
class Enrichment:
    """Best-effort results gathered before the record is written."""

    network: GeoResult
    device: GeoResult
    audio: Optional[StoredMedia]
    image: Optional[StoredMedia]


class IngestionService:
    """Validate, enrich, score and persist one submission per call."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        writer: Optional[SubmissionWriter] = None,
        media_store: Optional[MediaUploader] = None,
        network_lookup: Optional[NetworkLookup] = None,
        reverse_lookup: Optional[ReverseLookup] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.writer = writer or PostgresSubmissionWriter(self.settings)
        self.media_store = media_store or MediaStore(self.settings)
        self.network_lookup = network_lookup or functools.partial(
            lookup_network, settings=self.settings
        )
        self.reverse_lookup = reverse_lookup or functools.partial(
            reverse_geocode, settings=self.settings
        )

    def ingest(self, raw: Any, address: str) -> IngestionResult:
        """Handle one raw JSON body received from ``address``."""
        decision = evaluate(raw)
        if isinstance(decision, RejectDecision):
            logger.info("ingest.rejected reason=%s address=%s", decision.reason, address)
            return IngestionResult(status_code=400, body=SubmissionError(error=decision.message))

        payload = decision.payload
        enrichment = self._enrich(payload, address)
        record = build_record(payload, address, enrichment)

        try:
            submission_id = self.writer.insert(record)
        except Exception:
            logger.exception(
                "ingest.persist_failed address=%s source=%s has_audio=%s has_image=%s",
                address,
                record.location.source.value,
                record.audio_url is not None,
                record.image_url is not None,
            )
            return IngestionResult(
                status_code=500, body=SubmissionError(error=GENERIC_FAILURE_MESSAGE)
            )

        logger.info(
            "ingest.complete id=%s source=%s score=%s flags=%s",
            submission_id,
            record.location.source.value,
            record.trust.score,
            ",".join(sorted(record.trust.flags)) or "-",
        )
        return IngestionResult(
            status_code=200,
            body=SubmissionAck(
                id=submission_id,
                location=LocationSummary(
                    city=record.location.city,
                    country=record.location.country,
                    source=record.location.source,
                ),
            ),
        )

    def _enrich(self, payload: SubmissionPayload, address: str) -> Enrichment:
        coords = payload.location_coords if payload.location_precise else None
        workers = max(1, self.settings.enrichment_max_workers)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            network_future = executor.submit(self.network_lookup, address)
            device_future = (
                executor.submit(self.reverse_lookup, coords.lat, coords.lng)
                if coords is not None
                else None
            )
            audio_future = (
                executor.submit(self.media_store.store, MediaKind.AUDIO, payload.audio_data)
                if payload.audio_data
                else None
            )
            image_future = (
                executor.submit(self.media_store.store, MediaKind.IMAGE, payload.image_data)
                if payload.image_data
                else None
            )

            network = _settle(
                network_future,
                lambda exc: GeoResult.failed(Provenance.NETWORK, str(exc)),
                "network_lookup",
            )
            device = (
                _settle(
                    device_future,
                    lambda exc: GeoResult.failed(Provenance.DEVICE, str(exc)),
                    "reverse_lookup",
                )
                if device_future is not None
                else GeoResult.failed(Provenance.DEVICE, "not requested")
            )
            audio = (
                _settle(
                    audio_future,
                    lambda exc: StoredMedia(kind=MediaKind.AUDIO, error=str(exc)),
                    "audio_upload",
                )
                if audio_future is not None
                else None
            )
            image = (
                _settle(
                    image_future,
                    lambda exc: StoredMedia(kind=MediaKind.IMAGE, error=str(exc)),
                    "image_upload",
                )
                if image_future is not None
                else None
            )

        return Enrichment(network=network, device=device, audio=audio, image=image)


def choose_location(
    location_precise: bool,
    network: GeoResult,
    device: GeoResult,
) -> FinalLocation:
    """Device location wins only when precise mode resolved a city."""
    if location_precise and device.descriptor.city:
        chosen, source = device.descriptor, LocationSource.GPS
    else:
        chosen, source = network.descriptor, LocationSource.IP
    return FinalLocation(
        city=chosen.city,
        region=chosen.region,
        country=chosen.country,
        country_code=chosen.country_code,
        source=source,
    )


def build_record(
    payload: SubmissionPayload,
    address: str,
    enrichment: Enrichment,
) -> SubmissionRecord:
    """Assemble the persisted record from a validated payload and enrichment."""
    network = enrichment.network
    device = enrichment.device

    assessment = score_consistency(
        network.descriptor.country_code,
        device.descriptor.country_code,
        payload.timezone,
        payload.languages,
    )
    assessment = with_network_flags(assessment, network.is_vpn, network.is_datacenter)

    return SubmissionRecord(
        message=payload.message,
        audio_url=_media_url(enrichment.audio),
        audio_duration_seconds=payload.audio_duration,
        image_url=_media_url(enrichment.image),
        contact_email=payload.contact_email,
        contact_social=payload.contact_social,
        location_precise=payload.location_precise,
        location_coords=payload.location_coords,
        location=choose_location(payload.location_precise, network, device),
        origin=NetworkOrigin(
            address=address,
            location=network.descriptor,
            is_vpn=network.is_vpn,
            is_datacenter=network.is_datacenter,
            isp=network.isp,
        ),
        device_info=payload.device_info,
        timezone=payload.timezone,
        timezone_offset=payload.timezone_offset,
        languages=payload.languages,
        trust=assessment,
    )


def _media_url(stored: Optional[StoredMedia]) -> Optional[str]:
    if stored is None or not stored.ok:
        return None
    return stored.url


def _settle(future: Future[T], fallback: Callable[[Exception], T], step: str) -> T:
    try:
        return future.result()
    except Exception as exc:
        logger.warning("ingest.enrichment_failed step=%s error=%s", step, exc)
        return fallback(exc)
