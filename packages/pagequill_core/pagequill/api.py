"""

High-level API for PageQuill.

Every public entry point is a job boundary: fatal errors raised anywhere in
the pipeline are logged with context and surface as a single
DocumentGenerationError. No partial document is ever returned or written.

Usage example:
>>> from pagequill import ContentSource, PaginationOptions, render_to_pdf
>>>
>>> source = ContentSource.from_file("lesson.html", selector="#worksheet")
>>> render_to_pdf(source, "lesson.pdf", PaginationOptions(margin_pt=40))

"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from .config import PaginationOptions
from .exceptions import DocumentGenerationError, PageQuillError
from .render.barrier import RenderReadinessBarrier
from .render.browser import BrowserSession, ContentSource
from .render.content_tree import ContentTree
from .render.rasterizer import Rasterizer
from .renderers import PdfRenderer, create_renderer

logger = logging.getLogger(__name__)

__all__ = [
    "generate_pdf",
    "generate_image",
    "render_to_image",
    "render_to_pdf",
]

IMAGE_OVERSAMPLING = 2.0


async def generate_pdf(
    source: ContentSource,
    options: Optional[PaginationOptions] = None,
    renderer: Optional[PdfRenderer] = None,
) -> bytes:
    """
    Paginate ``source`` into PDF bytes.

    Args:
        source: Content to render
        options: Pagination options (defaults apply when omitted)
        renderer: Pre-built renderer, otherwise chosen by ``options.renderer``

    Returns:
        Complete PDF file contents

    Raises:
        DocumentGenerationError: If any fatal error aborted the job
    """
    options = options or PaginationOptions()
    try:
        renderer = renderer or create_renderer(options)
        data = await renderer.render(source)
    except PageQuillError as exc:
        logger.error(
            f"PDF generation failed for {options.filename!r} "
            f"(renderer={options.renderer}): {exc}"
        )
        raise DocumentGenerationError(exc, filename=options.filename) from exc
    except Exception as exc:
        logger.exception(
            f"Unexpected error generating {options.filename!r} "
            f"(renderer={options.renderer})"
        )
        raise DocumentGenerationError(exc, filename=options.filename) from exc

    logger.info(f"Generated {options.filename} ({len(data)} bytes) with {options.renderer} renderer")
    return data


def render_to_pdf(
    source: ContentSource,
    output_path: Union[str, Path, None] = None,
    options: Optional[PaginationOptions] = None,
) -> Path:
    """
    Synchronous wrapper writing the PDF to disk.

    The file is only created once the whole document was generated.

    Args:
        source: Content to render
        output_path: Target file (defaults to ``options.filename``)
        options: Pagination options

    Returns:
        Path of the written file
    """
    options = options or PaginationOptions()
    data = asyncio.run(generate_pdf(source, options))
    path = Path(output_path or options.filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info(f"PDF saved as {path}")
    return path


async def generate_image(
    source: ContentSource,
    options: Optional[PaginationOptions] = None,
) -> bytes:
    """
    Capture the element matched by ``source.selector`` as a PNG.

    The capture is taken at twice the CSS resolution on a white background.

    Raises:
        DocumentGenerationError: If the capture failed
    """
    options = (options or PaginationOptions()).with_overrides(oversampling=IMAGE_OVERSAMPLING)
    barrier = RenderReadinessBarrier(font_timeout=options.font_timeout_s, settle_delay=options.settle_delay_s)
    rasterizer = Rasterizer(image_format="PNG", block_selector=None)
    try:
        async with BrowserSession(options) as session:
            page = await session.open(source)
            tree = await ContentTree.locate(page, source.selector)
            await barrier.ensure_ready(tree)
            image = await rasterizer.capture(tree, IMAGE_OVERSAMPLING)
    except PageQuillError as exc:
        logger.error(f"Image export failed for {source.selector!r}: {exc}")
        raise DocumentGenerationError(exc, filename=options.filename) from exc
    except Exception as exc:
        logger.exception(f"Unexpected error exporting image of {source.selector!r}")
        raise DocumentGenerationError(exc, filename=options.filename) from exc
    return image.data


def render_to_image(
    source: ContentSource,
    output_path: Union[str, Path],
    options: Optional[PaginationOptions] = None,
) -> Path:
    """Synchronous wrapper writing the PNG export to disk."""
    data = asyncio.run(generate_image(source, options))
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info(f"Image saved as {path}")
    return path
