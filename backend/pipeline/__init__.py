from pipeline.context import RequestContext
from pipeline.dispatcher import PipelineMiddleware, finalize, run_stages
from pipeline.errors import BadRequest, InternalFailure, NotFound, PayloadTooLarge
from pipeline.stages import SECURITY_HEADERS, Stage, default_stages

__all__ = [
    "RequestContext",
    "PipelineMiddleware",
    "finalize",
    "run_stages",
    "BadRequest",
    "InternalFailure",
    "NotFound",
    "PayloadTooLarge",
    "SECURITY_HEADERS",
    "Stage",
    "default_stages",
]
