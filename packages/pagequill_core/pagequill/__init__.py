"""
PageQuill - paginates rendered rich content into fixed-size PDF pages.

A live HTML tree (text, typeset math, tables, images) laid out at an on-screen
authoring width is captured in a headless browser and turned into a PDF
without ever splitting an atomic block across a page boundary.

Quick Start:
    from pagequill import ContentSource, PaginationOptions, render_to_pdf

    source = ContentSource.from_file("notes.html", selector="#notes")
    render_to_pdf(source, "notes.pdf", PaginationOptions(orientation="portrait"))
"""

from .version import __version__, __version_info__

from .exceptions import (
    CaptureError,
    CaptureFailure,
    CaptureTargetMissing,
    ConfigurationError,
    DocumentGenerationError,
    GeometryError,
    PageQuillError,
    RemoteRenderFailure,
    TypesettingTimeout,
)
from .config import PaginationOptions
from .engine import PageGeometry, compute_page_geometry
from .render import ContentSource
from .renderers import create_renderer
from .api import generate_image, generate_pdf, render_to_image, render_to_pdf

__all__ = [
    "__version__",
    "__version_info__",
    "CaptureError",
    "CaptureFailure",
    "CaptureTargetMissing",
    "ConfigurationError",
    "ContentSource",
    "DocumentGenerationError",
    "GeometryError",
    "PageGeometry",
    "PageQuillError",
    "PaginationOptions",
    "RemoteRenderFailure",
    "TypesettingTimeout",
    "compute_page_geometry",
    "create_renderer",
    "generate_image",
    "generate_pdf",
    "render_to_image",
    "render_to_pdf",
]
