from typing import Any, Optional

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field

from models.session import Session


class CookieSpec(BaseModel):
    name: str
    value: str
    max_age: int
    path: str = "/"
    httponly: bool = True


class RequestContext(BaseModel):
    """
    Everything the pipeline knows about one request.

    Frozen: a stage that wants to change something returns a copy via
    model_copy(update=...). response_headers and cookies_to_set are applied
    to whichever response ends up being sent.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    headers: dict[str, str] = Field(default_factory=dict)      # lower-cased names
    cookies: dict[str, str] = Field(default_factory=dict)
    raw_body: bytes = b""
    body: Any = Field(default_factory=dict)
    session: Optional[Session] = None
    session_is_new: bool = False
    response_headers: dict[str, str] = Field(default_factory=dict)
    cookies_to_set: list[CookieSpec] = Field(default_factory=list)

    @property
    def media_type(self) -> str:
        content_type = self.headers.get("content-type", "")
        return content_type.split(";", 1)[0].strip().lower()

    @classmethod
    async def from_request(cls, request: Request) -> "RequestContext":
        return cls(
            method=request.method.upper(),
            path=request.scope["path"],
            headers={k.lower(): v for k, v in request.headers.items()},
            cookies=dict(request.cookies),
            raw_body=await request.body(),
        )
