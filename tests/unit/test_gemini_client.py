"""Tests unitaires pour le client Gemini et la classification des erreurs."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors as genai_errors

from chicpic.config.settings import Settings
from chicpic.generation import (
    ClientNotConfiguredError,
    ErrorKind,
    GeminiClient,
    GenerationParams,
    ModelCallError,
    UnconfiguredClient,
    build_client,
)
from chicpic.generation.client import classify_api_error, parse_retry_delay


class _FakeApiError(Exception):
    def __init__(self, code=None, status=None, message="boom", details=None):
        super().__init__(message)
        self.code = code
        self.status = status
        self.message = message
        self.details = details


def _sdk_client() -> MagicMock:
    sdk = MagicMock()
    sdk.aio.models.generate_content = AsyncMock()
    sdk.aio.models.generate_videos = AsyncMock()
    sdk.aio.operations.get = AsyncMock()
    return sdk


def _client(sdk: MagicMock) -> GeminiClient:
    return GeminiClient(
        api_key="test-key",
        image_model="image-model",
        text_model="text-model",
        video_model="video-model",
        sdk_client=sdk,
    )


@pytest.mark.unit
class TestErrorClassification:
    """Tests pour classify_api_error et parse_retry_delay."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('{"retryDelay": "17s"}', 17.0),
            ("Quota exceeded, please retry in 2.5s.", 2.5),
            ("no hint here", None),
            (None, None),
        ],
    )
    def test_parse_retry_delay(self, text, expected):
        """Test la lecture du délai de retry fourni par le serveur."""
        assert parse_retry_delay(text) == expected

    def test_quota_by_code(self):
        """Test qu'un code 429 est classé en quota."""
        error = classify_api_error(_FakeApiError(code=429, details={"retryDelay": "12s"}))
        assert error.kind is ErrorKind.QUOTA
        assert error.is_quota
        assert error.retry_after == 12.0
        assert error.status_code == 429

    def test_quota_by_status(self):
        """Test qu'un statut RESOURCE_EXHAUSTED est classé en quota."""
        error = classify_api_error(_FakeApiError(code=None, status="RESOURCE_EXHAUSTED"))
        assert error.kind is ErrorKind.QUOTA
        assert error.retry_after is None

    @pytest.mark.parametrize(
        "code,kind",
        [
            (404, ErrorKind.NOT_FOUND),
            (400, ErrorKind.INVALID_REQUEST),
            (503, ErrorKind.UNAVAILABLE),
            (500, ErrorKind.OTHER),
        ],
    )
    def test_kinds(self, code, kind):
        """Test la classification des autres erreurs de l'API."""
        error = classify_api_error(_FakeApiError(code=code, message="failure"))
        assert error.kind is kind
        assert str(error) == "failure"
        assert error.retry_after is None


@pytest.mark.unit
class TestGenerationParams:
    """Tests pour GenerationParams."""

    def test_defaults(self):
        """Test les paramètres de génération par défaut."""
        params = GenerationParams.for_asset("garment")
        assert (params.temperature, params.top_p, params.top_k) == (0.7, 0.8, 40)
        assert params.response_modalities == ["IMAGE", "TEXT"]

    def test_model_is_more_conservative(self):
        """Test que les modèles utilisent des paramètres plus prudents."""
        params = GenerationParams.for_asset("model")
        assert (params.temperature, params.top_p, params.top_k) == (0.6, 0.7, 30)

    def test_to_config(self):
        """Test la conversion en GenerateContentConfig."""
        config = GenerationParams().to_config()
        assert config.max_output_tokens == 8192
        assert config.temperature == 0.7


@pytest.mark.unit
class TestGeminiClient:
    """Tests pour GeminiClient."""

    def test_requires_api_key(self):
        """Test qu'une clé API est obligatoire."""
        with pytest.raises(ClientNotConfiguredError):
            GeminiClient(api_key="", image_model="a", text_model="b", video_model="c", sdk_client=MagicMock())

    async def test_generate_image_sends_prompt_then_images(self, reference_image):
        """Test que le prompt est envoyé avant les images de référence."""
        sdk = _sdk_client()
        sdk.aio.models.generate_content.return_value = {"candidates": []}

        result = await _client(sdk).generate_image("draw", [reference_image, reference_image])

        assert result == {"candidates": []}
        kwargs = sdk.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "image-model"
        assert kwargs["contents"][0] == "draw"
        assert len(kwargs["contents"]) == 3
        assert kwargs["contents"][1].inline_data.mime_type == "image/png"

    async def test_api_error_is_classified(self):
        """Test qu'une erreur de l'API devient ModelCallError."""
        sdk = _sdk_client()
        sdk.aio.models.generate_content.side_effect = genai_errors.ClientError(
            429,
            {
                "error": {
                    "code": 429,
                    "message": "Resource has been exhausted",
                    "status": "RESOURCE_EXHAUSTED",
                    "details": [{"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "7s"}],
                }
            },
        )

        with pytest.raises(ModelCallError) as exc_info:
            await _client(sdk).generate_image("draw")

        assert exc_info.value.kind is ErrorKind.QUOTA
        assert exc_info.value.retry_after == 7.0

    async def test_generate_text(self):
        """Test la génération de texte."""
        sdk = _sdk_client()
        sdk.aio.models.generate_content.return_value = SimpleNamespace(text="una camiseta")

        assert await _client(sdk).generate_text("describe") == "una camiseta"
        assert sdk.aio.models.generate_content.await_args.kwargs["model"] == "text-model"

    async def test_download_video_prefers_inline_bytes(self):
        """Test que les octets inline de la vidéo sont utilisés en priorité."""
        sdk = _sdk_client()
        data = await _client(sdk).download_video(SimpleNamespace(video_bytes=b"mp4"))
        assert data == b"mp4"
        sdk.files.download.assert_not_called()

    async def test_download_video_from_files_api(self):
        """Test le téléchargement de la vidéo via l'API Files."""
        sdk = _sdk_client()
        sdk.files.download.return_value = b"remote"
        video = SimpleNamespace(video_bytes=None, uri="files/abc")

        assert await _client(sdk).download_video(video) == b"remote"
        sdk.files.download.assert_called_once_with(file=video)


@pytest.mark.unit
class TestBuildClient:
    """Tests pour build_client et UnconfiguredClient."""

    def test_without_key(self):
        """Test qu'un client non configuré est construit sans clé."""
        client = build_client(Settings(google_api_key=None))
        assert isinstance(client, UnconfiguredClient)
        assert client.is_configured is False

    def test_with_key(self):
        """Test qu'un GeminiClient est construit avec une clé."""
        client = build_client(Settings(google_api_key="key"))
        assert isinstance(client, GeminiClient)
        assert client.is_configured is True

    async def test_unconfigured_client_raises(self):
        """Test que le client non configuré lève ClientNotConfiguredError."""
        client = UnconfiguredClient()
        with pytest.raises(ClientNotConfiguredError):
            await client.generate_image("draw")
        with pytest.raises(ClientNotConfiguredError):
            await client.generate_text("describe")
