from datetime import datetime, timezone

from fastapi import APIRouter, Request

from facts import ProcessFacts
from models.responses import HealthResponse

router = APIRouter(tags=["health"])


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2026-01-01T00:00:00.000Z."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
async def health(request: Request):
    """
    Liveness probe. Reports the current time and how many runtime
    dependencies the manifest declares.
    """
    facts: ProcessFacts = request.app.state.facts
    return HealthResponse(
        status="healthy",
        timestamp=iso_timestamp(facts.now()),
        dependencies=facts.dependency_count,
    )
