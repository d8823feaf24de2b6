"""Core data models for the wire payload, enrichment and persisted records."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


MAX_AUDIO_SECONDS = 60


class LocationSource(str, Enum):
    """Persisted provenance of the final location."""

    GPS = "gps"
    IP = "ip"


class Provenance(str, Enum):
    """Where a location descriptor came from."""

    NETWORK = "network"
    DEVICE = "device"


class SubmissionStatus(str, Enum):
    """Moderation state. Only the default is written by the pipeline."""

    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LocationCoords(_WireModel):
    """Device coordinates as reported by the client."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = None


class DeviceInfo(_WireModel):
    """Browser/device signals snapshot."""

    user_agent: Optional[str] = None
    platform: Optional[str] = None
    screen_resolution: Optional[str] = None
    language: Optional[str] = None


class SubmissionPayload(_WireModel):
    """Inbound contact submission, validated once at the ingestion boundary."""

    message: str = ""
    audio_data: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("audioData", "audioBase64", "audio_data")
    )
    audio_duration: Optional[int] = None
    image_data: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("imageData", "imageBase64", "image_data")
    )
    contact_email: Optional[str] = None
    contact_social: Optional[str] = None
    location_precise: Optional[bool] = False
    location_coords: Optional[LocationCoords] = None
    device_info: Optional[DeviceInfo] = Field(default_factory=DeviceInfo)
    timezone: Optional[str] = None
    timezone_offset: Optional[int] = None
    languages: Optional[list[str]] = Field(default_factory=list)

    @field_validator("location_precise", mode="before")
    @classmethod
    def _null_precise(cls, value: object) -> object:
        return False if value is None else value

    @field_validator("device_info", mode="before")
    @classmethod
    def _null_device_info(cls, value: object) -> object:
        return DeviceInfo() if value is None else value

    @field_validator("languages", mode="before")
    @classmethod
    def _null_languages(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("audio_duration", mode="before")
    @classmethod
    def _round_audio_duration(cls, value: object) -> object:
        if isinstance(value, float):
            return round(value)
        return value

    @field_validator("audio_duration")
    @classmethod
    def _clamp_audio_duration(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return None
        if value < 0:
            return 0
        if value > MAX_AUDIO_SECONDS:
            return MAX_AUDIO_SECONDS
        return value

    @field_validator("contact_email", "contact_social", "timezone")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("languages")
    @classmethod
    def _drop_empty_languages(cls, value: list[str]) -> list[str]:
        return [tag.strip() for tag in value if tag and tag.strip()]


class LocationDescriptor(BaseModel):
    """Normalized place; every field independently nullable."""

    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    provenance: Provenance = Provenance.NETWORK


class NetworkOrigin(BaseModel):
    """Network-address derived origin of a submission."""

    address: str = "unknown"
    location: LocationDescriptor = Field(default_factory=LocationDescriptor)
    is_vpn: bool = False
    is_datacenter: bool = False
    isp: Optional[str] = None


class TrustAssessment(BaseModel):
    """Consistency score plus anomaly flags."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=4)
    flags: frozenset[str] = Field(default_factory=frozenset)


class FinalLocation(BaseModel):
    """Location chosen for the record."""

    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    source: LocationSource = LocationSource.IP


class SubmissionRecord(BaseModel):
    """Assembled record ready for the submissions table."""

    message: str
    audio_url: Optional[str] = None
    audio_duration_seconds: Optional[int] = Field(default=None, le=MAX_AUDIO_SECONDS)
    image_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_social: Optional[str] = None
    location_precise: bool = False
    location_coords: Optional[LocationCoords] = None
    location: FinalLocation = Field(default_factory=FinalLocation)
    origin: NetworkOrigin = Field(default_factory=NetworkOrigin)
    device_info: DeviceInfo = Field(default_factory=DeviceInfo)
    timezone: Optional[str] = None
    timezone_offset: Optional[int] = None
    languages: list[str] = Field(default_factory=list)
    trust: TrustAssessment = Field(default_factory=lambda: TrustAssessment(score=0))
    status: SubmissionStatus = SubmissionStatus.UNREAD
    admin_notes: Optional[str] = None
    is_spam: bool = False


class LocationSummary(BaseModel):
    """User-facing location in the acknowledgement."""

    city: Optional[str] = None
    country: Optional[str] = None
    source: LocationSource


class SubmissionAck(BaseModel):
    """Successful ingestion response body."""

    success: bool = True
    id: str
    location: LocationSummary


class SubmissionError(BaseModel):
    """Failed ingestion response body."""

    success: bool = False
    error: str
