"""
Shared fixtures: a controllable clock, a six-dependency manifest, and an app
wired to both so responses are deterministic.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from config import Settings
from facts import ProcessFacts
from main import create_app
from manifest import load_manifest
from store import SessionStore

MANIFEST_TEXT = """
[project]
name = "fixture-app"
version = "2.3.4"
dependencies = [
    "fastapi",
    "uvicorn",
    "pydantic",
    "python-dotenv",
    "itsdangerous",
    "jinja2",
]

[project.optional-dependencies]
test = ["pytest"]
"""


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeMonotonic:
    def __init__(self, start: float = 1000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    path = tmp_path / "pyproject.toml"
    path.write_text(MANIFEST_TEXT)
    return path


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "hello.txt").write_text("hello from public\n")
    (root / "css" / "site.css").write_text("body { color: black; }\n")
    (root / ".secret").write_text("do not serve\n")
    return root


@pytest.fixture
def store(clock: FakeClock) -> SessionStore:
    return SessionStore(max_age=timedelta(hours=24), clock=clock)


@pytest.fixture
def app(manifest_path, public_dir, store, clock, monotonic):
    settings = Settings(public_dir=public_dir, manifest_path=manifest_path)
    facts = ProcessFacts(load_manifest(manifest_path), clock=clock, monotonic=monotonic)
    return create_app(settings, store=store, facts=facts)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
