"""
Server configuration.

Values come from the process environment (a local .env file is loaded by
main.py before this module is used). Anything unset or unparseable falls
back to the defaults below.

  PORT=4000
  SESSION_SECRET=socket-demo-secret
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

BACKEND_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = BACKEND_ROOT.parent

DEFAULT_PORT = 4000
DEFAULT_SESSION_MAX_AGE = 24 * 60 * 60      # 24 hours, in seconds
DEFAULT_BODY_LIMIT = 100 * 1024             # 100kb per body
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    session_secret: str = "socket-demo-secret"
    session_cookie_name: str = "connect.sid"
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    public_dir: Path = BACKEND_ROOT / "public"
    manifest_path: Path = PROJECT_ROOT / "pyproject.toml"
    body_limit: int = DEFAULT_BODY_LIMIT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()

        values = {
            "host": env.get("HOST") or defaults.host,
            "port": _parse_port(env.get("PORT"), defaults.port),
            "session_secret": env.get("SESSION_SECRET") or defaults.session_secret,
            "session_cookie_name": env.get("SESSION_COOKIE_NAME") or defaults.session_cookie_name,
            "session_max_age": _parse_positive_int(
                "SESSION_MAX_AGE", env.get("SESSION_MAX_AGE"), defaults.session_max_age
            ),
            "body_limit": _parse_positive_int("BODY_LIMIT", env.get("BODY_LIMIT"), defaults.body_limit),
            "log_level": _parse_log_level(env.get("LOG_LEVEL"), defaults.log_level),
        }
        if env.get("PUBLIC_DIR"):
            values["public_dir"] = Path(env["PUBLIC_DIR"])
        if env.get("MANIFEST_PATH"):
            values["manifest_path"] = Path(env["MANIFEST_PATH"])

        return cls(**values)


def _parse_port(raw: Optional[str], default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        port = int(raw)
    except ValueError:
        logger.warning("PORT=%r is not a number, using %d", raw, default)
        return default
    if not 0 <= port <= 65535:
        logger.warning("PORT=%d is out of range, using %d", port, default)
        return default
    return port


def _parse_positive_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s=%r is not a number, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using %d", name, default)
        return default
    return value


def _parse_log_level(raw: Optional[str], default: str) -> str:
    if not raw:
        return default
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("LOG_LEVEL=%r is not recognised, using %s", raw, default)
        return default
    return level
