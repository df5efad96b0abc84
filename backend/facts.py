"""
Immutable process facts reported by /health and /api/info.

Captured once at startup. Uptime is measured on a monotonic clock so it
never runs backwards, even if the wall clock is adjusted.
"""

import platform
import time
from datetime import datetime
from typing import Callable

from manifest import Manifest
from store import Clock, utc_now

APP_NAME = "Socket NodeGoat Demo"


def runtime_version() -> str:
    return f"v{platform.python_version()}"


class ProcessFacts:
    def __init__(
        self,
        manifest: Manifest,
        clock: Clock = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.app_name = APP_NAME
        self.version = manifest.version
        self.dependency_count = manifest.dependency_count
        self.runtime_version = runtime_version()
        self.clock = clock
        self.started_at: datetime = clock()
        self._monotonic = monotonic
        self._started = monotonic()

    def now(self) -> datetime:
        return self.clock()

    def uptime(self) -> float:
        return max(0.0, self._monotonic() - self._started)
