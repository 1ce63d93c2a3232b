"""Tests for the job boundary API."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from pagequill.api import generate_pdf, render_to_pdf
from pagequill.config import PaginationOptions
from pagequill.exceptions import (
    CaptureFailure,
    CaptureTargetMissing,
    DocumentGenerationError,
    GeometryError,
    RemoteRenderFailure,
)
from pagequill.render.browser import ContentSource
from pagequill.renderers import LocalTiledRenderer
from tests.conftest import FakeContentTree


def renderer_returning(result=None, error=None):
    renderer = MagicMock()
    renderer.render = AsyncMock(return_value=result, side_effect=error)
    return renderer


@pytest.fixture
def source():
    return ContentSource.from_html("<div id='notes'><p>Hi</p></div>", selector="#notes")


class TestGeneratePdf:
    """Test suite for generate_pdf."""

    @pytest.mark.asyncio
    async def test_returns_bytes(self, source):
        renderer = renderer_returning(b"%PDF-1.4 ok")
        data = await generate_pdf(source, PaginationOptions(), renderer=renderer)

        assert data == b"%PDF-1.4 ok"
        renderer.render.assert_awaited_once_with(source)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        CaptureTargetMissing("Content element not found", "#notes"),
        CaptureFailure("Could not capture"),
        RemoteRenderFailure(500, "boom"),
        GeometryError("Margin leaves no printable area"),
    ])
    async def test_fatal_errors_become_document_generation_error(self, source, error):
        with pytest.raises(DocumentGenerationError) as exc_info:
            await generate_pdf(source, PaginationOptions(filename="x.pdf"), renderer=renderer_returning(error=error))

        assert exc_info.value.cause is error
        assert exc_info.value.__cause__ is error
        assert exc_info.value.filename == "x.pdf"
        assert exc_info.value.message == "Could not generate document"

    @pytest.mark.asyncio
    async def test_invalid_options_fail_at_boundary(self, source):
        with pytest.raises(DocumentGenerationError):
            await generate_pdf(source, PaginationOptions(margin_pt=400))

    @pytest.mark.asyncio
    async def test_error_logged_with_context(self, source, caplog):
        with pytest.raises(DocumentGenerationError):
            await generate_pdf(
                source,
                PaginationOptions(filename="worksheet.pdf"),
                renderer=renderer_returning(error=CaptureFailure("boom")),
            )
        assert "worksheet.pdf" in caplog.text
        assert "renderer=local" in caplog.text

    @pytest.mark.asyncio
    async def test_browser_error_during_typesetting_fails_at_boundary(self, source, fast_options):
        class ContextLostTree(FakeContentTree):
            async def typeset(self):
                raise PlaywrightError("Execution context was destroyed")

        tree = ContextLostTree(blocks=[(0, 400)])
        renderer = LocalTiledRenderer(fast_options)

        async def render(_source):
            return await renderer.render_tree(tree)

        renderer.render = render

        with pytest.raises(DocumentGenerationError) as exc_info:
            await generate_pdf(source, fast_options, renderer=renderer)

        assert isinstance(exc_info.value.cause, PlaywrightError)
        assert "Execution context was destroyed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_document_generation_error(self, source, caplog):
        error = ValueError("image has zero height")
        with pytest.raises(DocumentGenerationError) as exc_info:
            await generate_pdf(
                source,
                PaginationOptions(filename="quiz.pdf"),
                renderer=renderer_returning(error=error),
            )

        assert exc_info.value.cause is error
        assert exc_info.value.filename == "quiz.pdf"
        assert "quiz.pdf" in caplog.text


class TestRenderToPdf:
    """Test suite for the synchronous wrapper."""

    def test_writes_file_on_success(self, source, temp_dir):
        with patch("pagequill.api.create_renderer", return_value=renderer_returning(b"%PDF-1.4 ok")):
            path = render_to_pdf(source, temp_dir / "out.pdf")

        assert path.read_bytes() == b"%PDF-1.4 ok"

    def test_no_file_on_failure(self, source, temp_dir):
        target = temp_dir / "out.pdf"
        with patch("pagequill.api.create_renderer", return_value=renderer_returning(error=CaptureFailure("boom"))):
            with pytest.raises(DocumentGenerationError):
                render_to_pdf(source, target)

        assert not target.exists()

    def test_defaults_to_options_filename(self, source, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        with patch("pagequill.api.create_renderer", return_value=renderer_returning(b"%PDF")):
            path = render_to_pdf(source, options=PaginationOptions(filename="Notes-notes.pdf"))

        assert path.name == "Notes-notes.pdf"
        assert (temp_dir / "Notes-notes.pdf").exists()
