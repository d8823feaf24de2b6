"""Typer CLI entry point."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import orjson
import typer

from cip.client.capture import AUDIO_MIME_TYPE, IMAGE_MIME_TYPE, CaptureArtifact
from cip.client.consent import ConsentGate
from cip.client.devices import Position
from cip.client.orchestrator import (
    ContactForm,
    SubmissionCancelled,
    SubmissionFailure,
    SubmissionOrchestrator,
)
from cip.config import Settings
from cip.db.client import db_cursor
from cip.db.submissions import apply_schema
from cip.errors import SubmissionValidationError
from cip.models import MAX_AUDIO_SECONDS
from cip.trust.scorer import score_consistency, with_network_flags
from cip.utils.logging import configure_logging, get_logger


app = typer.Typer(help="Contact Ingestion Pipeline CLI")
db_app = typer.Typer(help="Database utilities")

app.add_typer(db_app, name="db")

logger = get_logger(__name__)


class StaticLocationSensor:
    """Location sensor answering with coordinates given on the command line."""

    def __init__(self, position: Optional[Position]) -> None:
        self.position = position

    def current_position(self, timeout: float, high_accuracy: bool) -> Position:
        if self.position is None:
            raise TimeoutError("no coordinates supplied")
        return self.position


@app.callback()
def main() -> None:
    """Initialize logging for all commands."""
    settings = Settings()
    configure_logging(settings.log_level)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (default from API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default from API_PORT)"),
) -> None:
    """Run the contact API."""
    import uvicorn

    from cip.api.app import create_app

    settings = Settings()
    uvicorn.run(
        create_app(),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


@app.command("submit")
def submit(
    message: str = typer.Option(..., "--message", "-m", help="Message text"),
    audio: Optional[Path] = typer.Option(None, help="Voice note file (webm)"),
    audio_duration: Optional[int] = typer.Option(None, help="Voice note length in seconds"),
    image: Optional[Path] = typer.Option(None, help="Selfie file (jpeg)"),
    email: Optional[str] = typer.Option(None, help="Contact email"),
    social: Optional[str] = typer.Option(None, help="Contact social handle"),
    mode: Optional[str] = typer.Option(
        None, help="Consent choice: precise, approximate or cancel (prompted if omitted)"
    ),
    lat: Optional[float] = typer.Option(None, help="Latitude for precise mode"),
    lng: Optional[float] = typer.Option(None, help="Longitude for precise mode"),
    accuracy: Optional[float] = typer.Option(None, help="Accuracy in meters"),
    endpoint: Optional[str] = typer.Option(None, help="Endpoint URL (default from env)"),
) -> None:
    """Send one submission through the consent gate to the contact API."""
    settings = Settings()
    if endpoint:
        settings = settings.model_copy(update={"contact_endpoint_url": endpoint})

    form = ContactForm(
        message=message,
        audio=_read_artifact(audio, AUDIO_MIME_TYPE, audio_duration),
        image=_read_artifact(image, IMAGE_MIME_TYPE, None),
        contact_email=email,
        contact_social=social,
    )

    gate = ConsentGate()
    try:
        disclosure = gate.open(form.message)
    except SubmissionValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(2)

    typer.echo("The following will be sent with your message:")
    for item in disclosure:
        typer.echo(f"  - {item}")

    choice = mode or typer.prompt("Location: [p]recise, [a]pproximate or [c]ancel", default="a")
    choice = choice.strip().lower()
    if choice.startswith("p"):
        gate.choose_precise()
    elif choice.startswith("a"):
        gate.choose_approximate()
    else:
        gate.cancel()
    decision = gate.resolve()

    position = None
    if lat is not None and lng is not None:
        position = Position(lat=lat, lng=lng, accuracy=accuracy)
    orchestrator = SubmissionOrchestrator(
        settings=settings,
        location_sensor=StaticLocationSensor(position),
    )
    outcome = orchestrator.submit(form, decision)

    if isinstance(outcome, SubmissionCancelled):
        typer.echo("Cancelled. Nothing was sent.")
        return
    if isinstance(outcome, SubmissionFailure):
        typer.echo(outcome.error, err=True)
        raise typer.Exit(1)

    place = ", ".join(part for part in (outcome.location.city, outcome.location.country) if part)
    source = outcome.location.source.value
    typer.echo(f"Sent. id={outcome.id} location={place or 'unknown'} ({source})")


@app.command("score")
def score(
    network_cc: Optional[str] = typer.Option(None, help="Network-derived country code"),
    device_cc: Optional[str] = typer.Option(None, help="Device-derived country code"),
    timezone: Optional[str] = typer.Option(None, help="IANA time zone name"),
    language: Optional[List[str]] = typer.Option(None, help="Language tag (repeatable)"),
    vpn: bool = typer.Option(False, help="Network lookup flagged a proxy/VPN"),
    datacenter: bool = typer.Option(False, help="Network lookup flagged hosting"),
) -> None:
    """Compute the consistency score for a set of signals."""
    assessment = score_consistency(network_cc, device_cc, timezone, language or [])
    assessment = with_network_flags(assessment, vpn, datacenter)
    typer.echo(
        orjson.dumps({"score": assessment.score, "flags": sorted(assessment.flags)}).decode()
    )


@db_app.command("check")
def db_check() -> None:
    """Check database connectivity."""
    try:
        with db_cursor() as cursor:
            cursor.execute("select 1")
            logger.info("db.check.ok")
    except Exception as exc:
        logger.error("db.check.failed: %s", exc)
        typer.echo(f"Database check failed: {exc}", err=True)
        raise typer.Exit(1)


@db_app.command("init")
def db_init() -> None:
    """Create the submissions table if it does not exist."""
    try:
        with db_cursor() as cursor:
            apply_schema(cursor)
    except Exception as exc:
        logger.error("db.init.failed: %s", exc)
        typer.echo(f"Schema setup failed: {exc}", err=True)
        raise typer.Exit(1)
    typer.echo("Schema ready.")


def _read_artifact(
    path: Optional[Path],
    mime_type: str,
    duration: Optional[int],
) -> Optional[CaptureArtifact]:
    if path is None:
        return None
    if not path.exists():
        raise typer.BadParameter(f"File not found: {path}")
    if duration is not None:
        duration = max(0, min(duration, MAX_AUDIO_SECONDS))
    return CaptureArtifact(data=path.read_bytes(), mime_type=mime_type, duration=duration)


if __name__ == "__main__":
    app()
