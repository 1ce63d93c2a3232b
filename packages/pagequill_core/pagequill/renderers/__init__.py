"""
PDF renderers - the pagination strategies.

- LocalTiledRenderer: one tall capture tiled over pages (default)
- MultiUnitRenderer: one page per self-contained unit
- RemoteServiceRenderer: markup snapshot printed by an external service
"""

from typing import Optional

from ..config import PaginationOptions
from .base import PdfRenderer
from .local import LocalTiledRenderer
from .markup import build_html_document
from .multi_unit import MultiUnitAssembler, MultiUnitRenderer, layout_pages
from .remote import RemoteServiceRenderer, build_payload, render_remote

RENDERER_CLASSES = {
    LocalTiledRenderer.name: LocalTiledRenderer,
    MultiUnitRenderer.name: MultiUnitRenderer,
    RemoteServiceRenderer.name: RemoteServiceRenderer,
}


def create_renderer(options: Optional[PaginationOptions] = None) -> PdfRenderer:
    """Instantiate the renderer selected by ``options.renderer``."""
    options = (options or PaginationOptions()).validate()
    return RENDERER_CLASSES[options.renderer](options)


__all__ = [
    "LocalTiledRenderer",
    "MultiUnitAssembler",
    "MultiUnitRenderer",
    "PdfRenderer",
    "RemoteServiceRenderer",
    "build_html_document",
    "build_payload",
    "create_renderer",
    "layout_pages",
    "render_remote",
]
