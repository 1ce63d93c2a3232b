"""
Browser-side rendering: content trees, readiness barrier and rasterization.
"""

from .barrier import RenderReadinessBarrier
from .browser import BrowserSession, ContentSource
from .content_tree import ContentTree, TypesetResult, acquire_capture_visibility, browser_errors, capture_visibility
from .rasterizer import Rasterizer, encode_raster

__all__ = [
    "BrowserSession",
    "ContentSource",
    "ContentTree",
    "Rasterizer",
    "RenderReadinessBarrier",
    "TypesetResult",
    "acquire_capture_visibility",
    "browser_errors",
    "capture_visibility",
    "encode_raster",
]
