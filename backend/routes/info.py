from fastapi import APIRouter, Request

from facts import ProcessFacts
from models.responses import InfoResponse

router = APIRouter(prefix="/api", tags=["info"])


@router.api_route("/info", methods=["GET", "HEAD"], response_model=InfoResponse)
async def info(request: Request):
    facts: ProcessFacts = request.app.state.facts
    return InfoResponse(
        app=facts.app_name,
        version=facts.version,
        runtime_version=facts.runtime_version,
        uptime=facts.uptime(),
    )
