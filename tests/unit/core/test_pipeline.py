"""Tests for MailPipeline."""

import email
import email.policy
import io
import tempfile
import time
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from markmail.config.settings import MarkmailSettings
from markmail.core.pipeline import MailPipeline
from markmail.exceptions import (
    ConfigurationError,
    ConversionError,
    TransformError,
    UnsupportedEncodingError,
)
from markmail.image.backends import create_toolset
from markmail.image.pillow_backend import PillowResizer
from markmail.mail.headers import HeaderOptions


class DelayedResizer(PillowResizer):
    """Pillow resizer that sleeps per staged identifier before working."""

    def __init__(self, delays: dict[str, float]) -> None:
        super().__init__()
        self.delays = delays
        self.finished: list[str] = []

    def resize(self, path, dest, width=None, height=None):
        identifier = dest.name.split(".", 1)[0]
        time.sleep(self.delays.get(identifier, 0))
        result = super().resize(path, dest, width, height)
        self.finished.append(identifier)
        return result


def parse_message(raw: bytes) -> email.message.EmailMessage:
    return email.message_from_bytes(raw, policy=email.policy.default)


def image_parts(message) -> list:
    return [part for part in message.iter_parts() if part.get_content_maintype() == "image"]


@pytest.fixture
def settings() -> MarkmailSettings:
    return MarkmailSettings()


@pytest.fixture
def staging_root(tmp_path, monkeypatch) -> Path:
    """Point tempfile at a private directory so staging leftovers are visible."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


class TestMailPipeline:
    """End-to-end bundling."""

    @pytest.mark.asyncio
    async def test_inline_and_resized_external(
        self, settings, write_html, make_image, data_uri, tmp_path
    ):
        make_image("photo.png", 400, 200)
        page = write_html(f'<img src="{data_uri(1, 1)}"><img src="photo.png" width="100">')
        output = tmp_path / "out" / "page.eml"

        result = await MailPipeline(settings).run_async(page, output)

        assert result.output_path == output
        assert result.images_count == 2
        assert result.size == output.stat().st_size

        message = parse_message(output.read_bytes())
        assert message.get_content_type() == "multipart/related"

        html, *_ = message.iter_parts()
        body = html.get_content()
        assert 'src="cid:part-0"' in body
        assert 'src="cid:part-1"' in body
        assert body.index("cid:part-0") < body.index("cid:part-1")

        first, second = image_parts(message)
        assert first["Content-ID"] == "<part-0>"
        assert second["Content-ID"] == "<part-1>"
        assert second.get_filename() == "photo.png"
        with Image.open(io.BytesIO(first.get_content())) as img:
            assert img.size == (1, 1)
        with Image.open(io.BytesIO(second.get_content())) as img:
            assert img.size == (100, 50)

    @pytest.mark.asyncio
    async def test_exact_dimensions(self, settings, write_html, make_image, tmp_path):
        make_image("photo.png", 400, 200)
        page = write_html('<img src="photo.png" width="10" height="90">')
        output = tmp_path / "page.eml"

        await MailPipeline(settings).run_async(page, output)

        (part,) = image_parts(parse_message(output.read_bytes()))
        with Image.open(io.BytesIO(part.get_content())) as img:
            assert img.size == (10, 90)

    @pytest.mark.asyncio
    async def test_natural_dimensions_backfilled(
        self, settings, write_html, make_image, tmp_path
    ):
        source = make_image("photo.png", 64, 48)
        page = write_html('<img src="photo.png">')
        output = tmp_path / "page.eml"

        await MailPipeline(settings).run_async(page, output)

        message = parse_message(output.read_bytes())
        html, part = message.iter_parts()
        assert 'width="64"' in html.get_content()
        assert 'height="48"' in html.get_content()
        assert part.get_content() == source.read_bytes()

    @pytest.mark.asyncio
    async def test_output_independent_of_completion_order(
        self, settings, write_html, make_image, tmp_path
    ):
        for i in range(4):
            make_image(f"img{i}.png", 40 + i, 20)
        page = write_html("".join(f'<img src="img{i}.png" width="{10 + i}">' for i in range(4)))

        reverse = DelayedResizer({"part-0": 0.3, "part-1": 0.2, "part-2": 0.1, "part-3": 0.0})
        tools = create_toolset()
        tools.resizer = reverse
        slow_first = tmp_path / "reverse.eml"
        await MailPipeline(settings, tools=tools).run_async(page, slow_first)

        in_order = tmp_path / "in-order.eml"
        await MailPipeline(settings).run_async(page, in_order)

        assert reverse.finished == ["part-3", "part-2", "part-1", "part-0"]
        assert slow_first.read_bytes() == in_order.read_bytes()

    @pytest.mark.asyncio
    async def test_unsupported_encoding_writes_nothing(
        self, settings, write_html, tmp_path, staging_root
    ):
        page = write_html('<img src="data:image/png,plaintext">')
        output = tmp_path / "page.eml"

        with pytest.raises(UnsupportedEncodingError) as exc_info:
            await MailPipeline(settings).run_async(page, output)

        assert exc_info.value.identifier == "part-0"
        assert not output.exists()
        assert list(staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_failure_keeps_existing_destination(self, settings, write_html, tmp_path):
        page = write_html('<img src="missing.png">')
        output = tmp_path / "page.eml"
        output.write_text("previous", encoding="utf-8")

        with pytest.raises(TransformError, match="not found"):
            await MailPipeline(settings).run_async(page, output)

        assert output.read_text(encoding="utf-8") == "previous"

    @pytest.mark.asyncio
    async def test_staging_removed_on_success(
        self, settings, write_html, make_image, tmp_path, staging_root
    ):
        make_image("photo.png", 8, 8)
        page = write_html('<img src="photo.png" width="4">')

        await MailPipeline(settings).run_async(page, tmp_path / "page.eml")

        assert list(staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_stream_output(self, settings, write_html, data_uri):
        page = write_html(f'<p>Hello</p><img src="{data_uri()}">')
        stream = io.BytesIO()
        options = HeaderOptions(sender="me@example.com", to=["you@example.com"], subject="Hi")

        result = await MailPipeline(settings, boundary="b-1").run_async(
            page, header_options=options, stream=stream
        )

        raw = stream.getvalue()
        assert result.output_path is None
        assert result.size == len(raw)
        assert raw.startswith(b"From: me@example.com\nTo: you@example.com\nSubject: Hi\n")
        assert raw.endswith(b"--b-1--\n")

    @pytest.mark.asyncio
    async def test_settings_headers_by_default(self, write_html):
        settings = MarkmailSettings(mail={"sender": "bot@example.com", "crlf": True})
        stream = io.BytesIO()

        await MailPipeline(settings).run_async(write_html("<p>x</p>"), stream=stream)

        assert stream.getvalue().startswith(b"From: bot@example.com\r\n")

    @pytest.mark.asyncio
    async def test_document_without_images(self, settings, write_html):
        stream = io.BytesIO()

        result = await MailPipeline(settings).run_async(write_html("<p>x</p>"), stream=stream)

        assert result.images_count == 0
        assert len(list(parse_message(stream.getvalue()).iter_parts())) == 1

    @pytest.mark.asyncio
    async def test_non_html_is_converted(self, settings, make_image, tmp_path):
        make_image("photo.png", 20, 10)
        source = tmp_path / "notes.md"
        source.write_text("![x](photo.png)", encoding="utf-8")

        async def fake_convert(file_path: Path, target_dir: Path) -> Path:
            html = target_dir / f"{file_path.stem}.html"
            html.write_text('<img src="photo.png" width="10">', encoding="utf-8")
            return html

        converter = AsyncMock()
        converter.convert.side_effect = fake_convert
        stream = io.BytesIO()

        result = await MailPipeline(settings, converter=converter).run_async(
            source, stream=stream
        )

        assert result.images_count == 1
        converter.convert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_conversion_failure(self, settings, tmp_path):
        source = tmp_path / "notes.md"
        source.write_text("# x", encoding="utf-8")
        converter = AsyncMock()
        converter.convert.side_effect = ConversionError(source, "pandoc missing")

        with pytest.raises(ConversionError):
            await MailPipeline(settings, converter=converter).run_async(
                source, tmp_path / "notes.eml"
            )

        assert not (tmp_path / "notes.eml").exists()

    def test_invalid_boundary_override(self, settings):
        with pytest.raises(ConfigurationError, match="Invalid boundary"):
            MailPipeline(settings, boundary="x" * 71)

    def test_empty_boundary_override(self, settings):
        with pytest.raises(ConfigurationError):
            MailPipeline(settings, boundary="")

    @pytest.mark.asyncio
    async def test_boundary_in_document_writes_nothing(
        self, settings, write_html, tmp_path, staging_root
    ):
        page = write_html("<pre>--collide</pre>")
        output = tmp_path / "page.eml"

        with pytest.raises(ConfigurationError, match="occurs in the document"):
            await MailPipeline(settings, boundary="collide").run_async(page, output)

        assert not output.exists()
        assert list(staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_header_injection_rejected(self, settings, write_html, tmp_path):
        output = tmp_path / "page.eml"
        options = HeaderOptions(subject="Hi\nBcc: victim@example.com")

        with pytest.raises(ConfigurationError, match="line breaks"):
            await MailPipeline(settings).run_async(
                write_html("<p>x</p>"), output, header_options=options
            )

        assert not output.exists()

    def test_sync_run(self, settings, write_html, tmp_path):
        output = tmp_path / "page.eml"

        result = MailPipeline(settings).run(write_html("<p>x</p>"), output)

        assert result.output_path == output
        assert output.exists()
