import os
import sys
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Service apps build their providers at import time; keep them offline
os.environ["GENERATION_PROVIDER"] = "stub"
os.environ["AI_PROVIDER"] = "stub"

from services.generation.config import JobClientConfig
from services.generation.drivers.geminigen import GeminiGenImageProvider
from shared.config import ServiceConfig
from shared.models import GenerationRequest
from shared.utils import config as service_config, ensure_directory


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately and records each delay."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class ScriptedProvider(GeminiGenImageProvider):
    """Image provider whose HTTP calls are replaced by scripted payloads.

    Status entries may be payload dicts or exceptions to raise.
    """

    def __init__(self, submit_payload: dict[str, Any], statuses: list[Any] | None = None) -> None:
        super().__init__(JobClientConfig(api_key="test-key"))
        self.submit_payload = submit_payload
        self.statuses = list(statuses or [])
        self.submitted: list[GenerationRequest] = []
        self.polled: list[str] = []

    async def submit(self, request: GenerationRequest) -> dict[str, Any]:
        self.submitted.append(request)
        if isinstance(self.submit_payload, Exception):
            raise self.submit_payload
        return self.submit_payload

    async def check_status(self, uuid: str) -> dict[str, Any]:
        self.polled.append(uuid)
        entry = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(entry, Exception):
            raise entry
        return entry


class FakeHTTPClient:
    """Async context manager mimicking AsyncHTTPClient for provider tests."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = responses
        self.calls: list[dict[str, Any]] = []

    async def __aenter__(self) -> "FakeHTTPClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None

    def _next(self) -> Any:
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def get(self, url: str, headers: dict[str, Any] | None = None) -> Any:
        self.calls.append({"method": "GET", "url": url, "headers": headers})
        return self._next()

    async def get_bytes(self, url: str, headers: dict[str, Any] | None = None) -> Any:
        self.calls.append({"method": "GET", "url": url, "headers": headers})
        return self._next()

    async def post_form(self, url: str, form: Any, headers: dict[str, Any] | None = None) -> Any:
        self.calls.append({"method": "POST", "url": url, "form": form, "headers": headers})
        return self._next()


def processing(uuid: str = "job-1", percentage: int | None = None, **extra: Any) -> dict[str, Any]:
    payload = {"uuid": uuid, "status": 1, **extra}
    if percentage is not None:
        payload["status_percentage"] = percentage
    return payload


def completed(uuid: str = "job-1", url: str = "https://cdn.example.com/out.png", **extra: Any) -> dict[str, Any]:
    return {"uuid": uuid, "status": 2, "status_percentage": 100, "generate_result": url, **extra}


def failed(uuid: str = "job-1", message: str = "quota exceeded", **extra: Any) -> dict[str, Any]:
    return {"uuid": uuid, "status": 3, "error_message": message, **extra}


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_http() -> Callable[[list[Any]], Callable[[], FakeHTTPClient]]:
    """Build an http_client_factory that serves the given responses in order."""

    def _factory(responses: list[Any]) -> Callable[[], FakeHTTPClient]:
        client = FakeHTTPClient(responses)
        factory = lambda: client  # noqa: E731
        factory.client = client  # type: ignore[attr-defined]
        return factory

    return _factory


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    root = tmp_path / "media"
    ensure_directory(str(root))
    return root


@pytest.fixture
def settings(media_root: Path) -> ServiceConfig:
    """Fresh configuration using the stub providers and a temporary media root."""
    config = ServiceConfig()
    config.set("generation_provider", "stub")
    config.set("text_generation_provider", "stub")
    config.set("geminigen_api_key", None)
    config.set("reference_image_url", None)
    config.set("media_root", str(media_root))
    return config


@pytest.fixture(autouse=True)
def test_environment(media_root: Path) -> Generator[None, None, None]:
    """Point the shared configuration at a per-test media root."""
    original_media_root = service_config.get("media_root")
    service_config.set("media_root", str(media_root))
    try:
        yield
    finally:
        service_config.set("media_root", original_media_root)
