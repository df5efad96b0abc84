"""
Request pipeline stages.

A stage takes a RequestContext and returns either an updated context (carry
on) or a Response (stop here and send it). Stages that need configuration are
built by a factory that closes over it. The default order is:

  1. security_headers   : protective response headers, always
  2. decode_body        : JSON / form bodies, 400 or 413 on bad input
  3. attach_session     : look up or create the cookie-backed session
  4. serve_static       : files under the public root
"""

import json
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import parse_qsl

from fastapi.responses import FileResponse, Response
from itsdangerous import BadSignature, Signer

from pipeline.context import CookieSpec, RequestContext
from pipeline.errors import BadRequest, PayloadTooLarge
from store import SessionStore

Stage = Callable[[RequestContext], Union[RequestContext, Response]]


# ---------- Security headers ----------

SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


def security_headers(ctx: RequestContext) -> RequestContext:
    return ctx.model_copy(
        update={"response_headers": {**ctx.response_headers, **SECURITY_HEADERS}}
    )


# ---------- Body decoding ----------

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
PARAMETER_LIMIT = 1000


def _decode_utf8(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise BadRequest("request body is not valid UTF-8") from None


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_json_body(raw: bytes):
    """Strict JSON: only an object or an array is accepted at the top level."""
    text = _decode_utf8(raw)
    stripped = text.lstrip(" \t\r\n")
    if not stripped or stripped[0] not in "{[":
        raise BadRequest("JSON body must be an object or an array")
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise BadRequest(f"malformed JSON body: {exc}") from exc


def parse_form_body(raw: bytes) -> dict:
    """
    Flat form decoding. Keys like "a[b]" are kept literally; a key that
    appears more than once collects its values into a list.
    """
    text = _decode_utf8(raw)
    if text.count("&") + 1 > PARAMETER_LIMIT:
        raise PayloadTooLarge("too many parameters")

    form: dict = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if key not in form:
            form[key] = value
        elif isinstance(form[key], list):
            form[key].append(value)
        else:
            form[key] = [form[key], value]
    return form


def body_decoder(limit: int) -> Stage:
    def decode_body(ctx: RequestContext) -> RequestContext:
        if not ctx.raw_body:
            return ctx

        media_type = ctx.media_type
        if media_type == JSON_MEDIA_TYPE:
            parse = parse_json_body
        elif media_type == FORM_MEDIA_TYPE:
            parse = parse_form_body
        else:
            return ctx

        if len(ctx.raw_body) > limit:
            raise PayloadTooLarge()
        return ctx.model_copy(update={"body": parse(ctx.raw_body)})

    return decode_body


# ---------- Sessions ----------

def sign_session_id(signer: Signer, session_id: str) -> str:
    return signer.sign(session_id).decode("utf-8")


def unsign_session_id(signer: Signer, cookie_value: str) -> Optional[str]:
    try:
        return signer.unsign(cookie_value).decode("utf-8")
    except BadSignature:
        return None


def session_attacher(store: SessionStore, signer: Signer, cookie_name: str) -> Stage:
    max_age = int(store.max_age.total_seconds())

    def attach_session(ctx: RequestContext) -> RequestContext:
        cookie_value = ctx.cookies.get(cookie_name)
        if cookie_value:
            session_id = unsign_session_id(signer, cookie_value)
            session = store.get(session_id) if session_id else None
            if session is not None:
                return ctx.model_copy(update={"session": session})

        session = store.create()
        cookie = CookieSpec(
            name=cookie_name,
            value=sign_session_id(signer, session.session_id),
            max_age=max_age,
        )
        return ctx.model_copy(update={
            "session": session,
            "session_is_new": True,
            "cookies_to_set": [*ctx.cookies_to_set, cookie],
        })

    return attach_session


# ---------- Static files ----------

def resolve_static_path(root: Path, url_path: str) -> Optional[Path]:
    """
    Maps a decoded URL path onto a regular file under root.
    Dotfiles, parent references and anything resolving outside root give None.
    """
    parts = [p for p in url_path.split("/") if p]
    if not parts:
        return None
    for part in parts:
        if part.startswith(".") or "\\" in part or "\x00" in part:
            return None

    candidate = root.joinpath(*parts).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


def static_files(root: Path) -> Stage:
    root = root.resolve()

    def serve_static(ctx: RequestContext) -> Union[RequestContext, Response]:
        if ctx.method not in ("GET", "HEAD"):
            return ctx
        target = resolve_static_path(root, ctx.path)
        if target is None:
            return ctx
        return FileResponse(target)

    return serve_static


def default_stages(store: SessionStore, signer: Signer, cookie_name: str,
                   public_dir: Path, body_limit: int) -> list[Stage]:
    return [
        security_headers,
        body_decoder(body_limit),
        session_attacher(store, signer, cookie_name),
        static_files(public_dir),
    ]
