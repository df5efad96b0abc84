"""
Dispatcher: runs the stage pipeline in front of the route table.

The first stage to return a Response ends the pipeline. If every stage passes
the request through, the FastAPI router (the route table) handles it.
Whichever response is sent, the headers and cookies collected on the context
are applied to it, so error and static responses carry them too.

Handlers reach the attached session through request.state.session.
"""

import logging
from typing import Sequence, Union

from fastapi import HTTPException, Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from pipeline.context import RequestContext
from pipeline.errors import InternalFailure, error_response
from pipeline.stages import Stage

logger = logging.getLogger(__name__)


def finalize(response: Response, ctx: RequestContext) -> Response:
    # Assignment replaces any existing value, so each header appears once.
    for name, value in ctx.response_headers.items():
        response.headers[name] = value
    for cookie in ctx.cookies_to_set:
        response.set_cookie(
            cookie.name,
            cookie.value,
            max_age=cookie.max_age,
            path=cookie.path,
            httponly=cookie.httponly,
        )
    return response


def run_stages(ctx: RequestContext, stages: Sequence[Stage]) -> Union[RequestContext, Response]:
    """
    Runs stages in order. Returns the context that came out of the last
    stage, or the finalized Response of the stage that short-circuited.
    A raised HTTPException becomes its error response; anything else is
    logged and becomes a 500.
    """
    for stage in stages:
        try:
            result = stage(ctx)
        except HTTPException as exc:
            return finalize(error_response(exc), ctx)
        except Exception:
            logger.exception("Pipeline stage %s failed", getattr(stage, "__name__", stage))
            return finalize(error_response(InternalFailure()), ctx)

        if isinstance(result, Response):
            return finalize(result, ctx)
        ctx = result
    return ctx


class PipelineMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, stages: Sequence[Stage]):
        super().__init__(app)
        self.stages = list(stages)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ctx = await RequestContext.from_request(request)

        result = run_stages(ctx, self.stages)
        if isinstance(result, Response):
            return result

        request.state.session = result.session

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
            response = error_response(InternalFailure())
        return finalize(response, result)
