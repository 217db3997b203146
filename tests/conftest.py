"""Shared fixtures: in-memory database, local storage, fake Gemini client."""

import base64
import io
from types import SimpleNamespace
from typing import Any, Optional

import httpx
import pytest
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chicpic.database.models import Base
from chicpic.generation import ReferenceImage, UnconfiguredClient
from chicpic.storage import LocalImageStorage


def make_png(width: int = 128, height: int = 128) -> bytes:
    """Noisy PNG, large enough to pass the image size check once base64-encoded."""
    buffer = io.BytesIO()
    Image.effect_noise((width, height), 64).convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()


def image_response(data: bytes, mime_type: str = "image/png", finish_reason: str = "STOP") -> dict:
    return {
        "candidates": [
            {
                "finish_reason": finish_reason,
                "content": {"parts": [{"inline_data": {"data": data, "mime_type": mime_type}}]},
            }
        ]
    }


def text_response(text: str) -> dict:
    return {"candidates": [{"finish_reason": "STOP", "content": {"parts": [{"text": text}]}}]}


def blocked_response(reason: str = "IMAGE_SAFETY", message: Optional[str] = None) -> dict:
    return {"candidates": [{"finish_reason": reason, "finish_message": message, "content": {"parts": []}}]}


class FakeGeminiClient:
    """Scripted stand-in for GeminiClient: pops queued results, records calls."""

    is_configured = True

    def __init__(self) -> None:
        self.image_results: list[Any] = []
        self.text_results: list[Any] = []
        self.image_calls: list[tuple] = []
        self.text_calls: list[tuple] = []

    @staticmethod
    def _next(queue: list[Any]) -> Any:
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def generate_image(self, prompt, reference_images=(), params=None):
        self.image_calls.append((prompt, tuple(reference_images), params))
        return self._next(self.image_results)

    async def generate_text(self, prompt, images=()):
        self.text_calls.append((prompt, tuple(images)))
        return self._next(self.text_results)


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_data_uri(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def reference_image(png_bytes: bytes) -> ReferenceImage:
    return ReferenceImage(data=png_bytes, mime_type="image/png")


@pytest.fixture
def responses() -> SimpleNamespace:
    """Builders for raw model responses (dict form of GenerateContentResponse)."""
    return SimpleNamespace(image=image_response, text=text_response, blocked=blocked_response)


@pytest.fixture
def fake_client() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
def unconfigured_client() -> UnconfiguredClient:
    return UnconfiguredClient()


@pytest.fixture
def storage(tmp_path) -> LocalImageStorage:
    return LocalImageStorage(tmp_path / "media", "http://test")


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory, storage, unconfigured_client):
    """Application with database, storage and model client overridden; rate limits off."""
    from chicpic.api.dependencies import get_db_session, get_gemini_client, get_http_client, get_storage
    from chicpic.api.main import app as fastapi_app
    from chicpic.api.middleware.rate_limit import limiter

    async def override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404)))

    fastapi_app.dependency_overrides[get_db_session] = override_db
    fastapi_app.dependency_overrides[get_storage] = lambda: storage
    fastapi_app.dependency_overrides[get_gemini_client] = lambda: unconfigured_client
    fastapi_app.dependency_overrides[get_http_client] = lambda: http_client
    limiter.enabled = False

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
async def api_client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
