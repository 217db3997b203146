"""Tests unitaires : validation, images de remplacement, chargement des images de référence."""

import base64

import httpx
import pytest

from chicpic.generation import ImageLoadError, create_placeholder, is_valid_image
from chicpic.generation.image_sources import format_data_uri, load_image_source, parse_data_uri
from chicpic.generation.validator import MIN_BASE64_LENGTH


@pytest.mark.unit
class TestIsValidImage:
    """Tests pour is_valid_image."""

    def test_valid_png(self, png_bytes):
        """Test qu'une image PNG valide est acceptée."""
        assert is_valid_image("image/png", base64.b64encode(png_bytes).decode())

    def test_mime_type_case_insensitive(self):
        """Test que le type MIME est comparé sans casse."""
        assert is_valid_image("IMAGE/JPEG", "A" * MIN_BASE64_LENGTH)

    @pytest.mark.parametrize(
        "mime_type,data",
        [
            ("image/png", "A" * (MIN_BASE64_LENGTH - 1)),
            ("image/svg+xml", "A" * MIN_BASE64_LENGTH),
            ("image/png", "not base64!" * 200),
            (None, "A" * MIN_BASE64_LENGTH),
            ("image/png", None),
        ],
    )
    def test_rejected(self, mime_type, data):
        """Test le rejet des images invalides."""
        assert not is_valid_image(mime_type, data)


@pytest.mark.unit
class TestPlaceholder:
    """Tests pour create_placeholder."""

    def _decode(self, uri: str) -> str:
        prefix = "data:image/svg+xml;base64,"
        assert uri.startswith(prefix)
        return base64.b64decode(uri[len(prefix):]).decode("utf-8")

    def test_label_and_kind(self):
        """Test le type et le libellé tronqué du placeholder."""
        svg = self._decode(create_placeholder("garment", "Camiseta roja de algodón para niños pequeños"))
        assert ">GARMENT<" in svg
        assert "Camiseta roja de algodón para ...</text>" in svg
        assert 'width="400" height="600"' in svg

    def test_description_is_escaped(self):
        """Test l'échappement XML de la description."""
        svg = self._decode(create_placeholder("look", "<b>&"))
        assert "&lt;b&gt;&amp;</text>" in svg
        assert "<b>" not in svg

    def test_short_description_not_truncated(self):
        """Test qu'une description courte n'est pas tronquée."""
        svg = self._decode(create_placeholder("garment", "jeans"))
        assert ">jeans</text>" in svg

    def test_exactly_thirty_characters_kept(self):
        """Test qu'une description de 30 caractères est conservée telle quelle."""
        description = "x" * 30
        svg = self._decode(create_placeholder("garment", description))
        assert f">{description}</text>" in svg

    def test_custom_size(self):
        """Test les dimensions personnalisées du placeholder."""
        svg = self._decode(create_placeholder("model", "x", width=200, height=300))
        assert 'width="200" height="300"' in svg


@pytest.mark.unit
class TestImageSources:
    """Tests pour load_image_source."""

    def test_data_uri_round_trip(self):
        """Test la construction et la lecture d'une data URI."""
        uri = format_data_uri("image/webp", "QUJD")
        assert parse_data_uri(uri) == ("image/webp", "QUJD")
        assert parse_data_uri("https://example.com/a.png") is None

    async def test_data_uri(self, png_data_uri, png_bytes):
        """Test le chargement d'une image depuis une data URI."""
        data, mime_type = await load_image_source(png_data_uri)
        assert data == png_bytes
        assert mime_type == "image/png"

    async def test_bare_base64_is_jpeg(self):
        """Test qu'un base64 brut est considéré comme JPEG."""
        data, mime_type = await load_image_source(base64.b64encode(b"raw").decode())
        assert data == b"raw"
        assert mime_type == "image/jpeg"

    @pytest.mark.parametrize("source", ["", "   "])
    async def test_empty_source(self, source):
        """Test qu'une source vide est rejetée."""
        with pytest.raises(ImageLoadError):
            await load_image_source(source)

    async def test_invalid_base64(self):
        """Test qu'un base64 invalide est rejeté."""
        with pytest.raises(ImageLoadError):
            await load_image_source("data:image/png;base64,@@@@")

    async def test_url_uses_content_type(self):
        """Test que le Content-Type de la réponse donne le type MIME."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=b"img", headers={"content-type": "image/webp; charset=binary"})
        )
        async with httpx.AsyncClient(transport=transport) as client:
            data, mime_type = await load_image_source("https://cdn.example.com/look", client)
        assert data == b"img"
        assert mime_type == "image/webp"

    async def test_url_falls_back_to_extension(self):
        """Test que l'extension de l'URL sert de type MIME de secours."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=b"img", headers={"content-type": "application/octet-stream"})
        )
        async with httpx.AsyncClient(transport=transport) as client:
            _, mime_type = await load_image_source("https://cdn.example.com/look.PNG?v=2", client)
        assert mime_type == "image/png"

    async def test_http_error(self):
        """Test qu'une erreur HTTP lève ImageLoadError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ImageLoadError, match="Failed to load image"):
                await load_image_source("https://cdn.example.com/missing.jpg", client)
