"""
Dispatch error taxonomy.

Each condition is an HTTPException so the router and the pipeline stages
raise the same thing; the dispatcher turns any of them into a
{"detail": ...} JSON response with the matching status.
"""

from fastapi import HTTPException
from fastapi.responses import JSONResponse


class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad Request"):
        super().__init__(status_code=400, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not Found"):
        super().__init__(status_code=404, detail=detail)


class PayloadTooLarge(HTTPException):
    def __init__(self, detail: str = "request entity too large"):
        super().__init__(status_code=413, detail=detail)


class InternalFailure(HTTPException):
    def __init__(self, detail: str = "Internal Server Error"):
        super().__init__(status_code=500, detail=detail)


def error_response(exc: HTTPException) -> JSONResponse:
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)
