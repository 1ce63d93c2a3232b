"""
Remote rendering strategy.

Instead of rasterizing locally, the rendered markup is snapshotted and sent to
an external HTML-to-PDF service that prints it with a real pagination engine.
The result is text-selectable, but depends on the network and the service.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from ..config import PaginationOptions
from ..engine.geometry import PageGeometry
from ..exceptions import CaptureTargetMissing, RemoteRenderFailure
from ..render.barrier import RenderReadinessBarrier
from ..render.capture_styles import build_suppression_css
from ..render.content_tree import ContentTree
from .base import PdfRenderer
from .markup import SLIDE_STYLES, build_html_document

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"

SERVICE_FORMATS = {"a3": "A3", "a4": "A4", "a5": "A5", "letter": "Letter", "legal": "Legal"}


def build_payload(html: str, geometry: PageGeometry, options: PaginationOptions) -> Dict[str, Any]:
    """JSON body understood by the rendering service."""
    margin = f"{geometry.margin:g}pt"
    return {
        "html": html,
        "filename": options.filename,
        "pdfOptions": {
            "format": SERVICE_FORMATS.get(options.page_format.lower(), options.page_format),
            "printBackground": True,
            "margin": {"top": margin, "right": margin, "bottom": margin, "left": margin},
            "landscape": options.is_landscape,
        },
    }


async def render_remote(
    markup: str,
    styles: str,
    geometry: PageGeometry,
    options: PaginationOptions,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    """
    Render ``markup`` through the remote PDF service.

    Args:
        markup: Content snapshot (HTML fragment)
        styles: Extra CSS for the document
        geometry: Page geometry (format and margins)
        options: Pagination options (URL, filename, orientation)
        client: Optional pre-configured client, e.g. with a mock transport

    Returns:
        PDF bytes

    Raises:
        RemoteRenderFailure: On transport errors, non-2xx answers or non-PDF bodies
    """
    html = build_html_document(markup, options.title or options.filename, styles)
    payload = build_payload(html, geometry, options)

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=options.remote_timeout_s)
    try:
        logger.info(f"Requesting PDF from {options.remote_url} ({len(html)} chars of HTML)")
        response = await client.post(options.remote_url, json=payload)
    except httpx.HTTPError as exc:
        logger.error(f"PDF service request failed: {exc}")
        raise RemoteRenderFailure(None, details=str(exc)) from exc
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        raise RemoteRenderFailure(response.status_code, response.text)
    if not response.content.startswith(PDF_MAGIC):
        content_type = response.headers.get("content-type", "unknown")
        raise RemoteRenderFailure(
            response.status_code,
            response.text[:500],
            details=f"Response is not a PDF (content-type: {content_type})",
        )

    logger.info(f"PDF service returned {len(response.content)} bytes")
    return response.content


class RemoteServiceRenderer(PdfRenderer):
    """Sends a snapshot of the rendered tree to the PDF service."""

    name = "remote"

    def __init__(
        self,
        options: Optional[PaginationOptions] = None,
        barrier: Optional[RenderReadinessBarrier] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(options, barrier)
        self.client = client

    async def snapshot(self, tree: ContentTree) -> Tuple[str, str]:
        """Return (markup, styles) for the tree."""
        opts = self.options
        if not opts.unit_selector:
            return await tree.inner_html(), ""

        units = await tree.units(opts.unit_selector)
        if not units:
            raise CaptureTargetMissing("No units found", f"{opts.unit_selector!r} in {tree.label}")
        parts = [await unit.outer_html() for unit in units]
        logger.debug(f"Snapshotted {len(parts)} unit(s) matching {opts.unit_selector!r}")
        styles = SLIDE_STYLES + build_suppression_css(None, opts.suppress_selectors)
        return "".join(parts), styles

    async def render_tree(self, tree: ContentTree) -> bytes:
        await self.barrier.ensure_ready(tree)
        markup, styles = await self.snapshot(tree)
        return await render_remote(markup, styles, self.geometry, self.options, client=self.client)
