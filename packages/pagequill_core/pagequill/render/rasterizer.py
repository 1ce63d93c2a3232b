"""
Rasterizer - captures a content tree as a single bitmap.

The tree is captured at the logical authoring width so that the px -> pt scale
of the page geometry stays valid for the bitmap. The capture is always opaque
(documents are printed on white) and carries the capture-time style patches
needed for legible math at raster resolution.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Sequence

from PIL import Image, UnidentifiedImageError
from playwright.async_api import Error as PlaywrightError

from ..engine.output import RasterImage
from ..exceptions import CaptureFailure, CaptureTargetMissing
from .capture_styles import build_capture_css
from .content_tree import ContentTree, capture_visibility

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


def encode_raster(
    png_bytes: bytes,
    css_width: float,
    oversampling: float,
    image_format: str = "JPEG",
    quality: int = 95,
) -> RasterImage:
    """
    Flatten, resample and encode a raw screenshot.

    The browser captures at its own device pixel ratio; when that differs from
    the requested oversampling the bitmap is resampled so that its width is
    ``css_width * oversampling`` pixels.

    Args:
        png_bytes: Raw PNG screenshot
        css_width: Width of the captured element in CSS pixels
        oversampling: Requested raster pixels per CSS pixel
        image_format: "JPEG" or "PNG"
        quality: JPEG quality (1-100)

    Returns:
        RasterImage

    Raises:
        CaptureFailure: For unreadable or empty captures
    """
    try:
        source = Image.open(BytesIO(png_bytes))
        source.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise CaptureFailure("Capture is not a readable image", str(exc)) from exc

    if source.width == 0 or source.height == 0:
        raise CaptureFailure("Capture is empty", f"{source.width}x{source.height}px")

    if source.mode in ("RGBA", "LA") or (source.mode == "P" and "transparency" in source.info):
        rgba = source.convert("RGBA")
        image = Image.new("RGB", rgba.size, WHITE)
        image.paste(rgba, mask=rgba.getchannel("A"))
    else:
        image = source.convert("RGB")

    if css_width > 0:
        target_width = max(int(round(css_width * oversampling)), 1)
        if target_width != image.width:
            target_height = max(int(round(image.height * target_width / image.width)), 1)
            logger.debug(f"Resampling capture {image.width}x{image.height} -> {target_width}x{target_height}")
            image = image.resize((target_width, target_height), Image.LANCZOS)

    fmt = image_format.upper()
    out = BytesIO()
    if fmt == "JPEG":
        image.save(out, format="JPEG", quality=quality, optimize=True)
    elif fmt == "PNG":
        image.save(out, format="PNG", optimize=True)
    else:
        raise CaptureFailure("Unsupported raster format", image_format)

    return RasterImage(
        data=out.getvalue(),
        format=fmt,
        width_px=image.width,
        height_px=image.height,
        oversampling=oversampling,
    )


class Rasterizer:
    """Captures ContentTrees into RasterImages."""

    def __init__(
        self,
        image_format: str = "JPEG",
        quality: int = 95,
        block_selector: Optional[str] = ".print-item",
        suppress_selectors: Sequence[str] = (),
    ):
        self.image_format = image_format
        self.quality = quality
        self.block_selector = block_selector
        self.suppress_selectors = tuple(suppress_selectors)

    async def capture(self, tree: ContentTree, oversampling: float = 2.0) -> RasterImage:
        """
        Capture ``tree`` at ``oversampling`` raster pixels per CSS pixel.

        Raises:
            CaptureTargetMissing: If the element is missing or detached
            CaptureFailure: For any other capture problem
        """
        if not await tree.is_attached():
            raise CaptureTargetMissing("Capture target is not attached", tree.label)

        css = build_capture_css(tree.scope_selector, self.block_selector, self.suppress_selectors)
        try:
            async with tree.scoped_styles(css), capture_visibility(tree):
                css_width = await tree.css_width()
                png_bytes = await tree.screenshot()
        except PlaywrightError as exc:
            if not await tree.is_attached():
                raise CaptureTargetMissing("Capture target was detached during capture", tree.label) from exc
            raise CaptureFailure(f"Could not capture {tree.label}", str(exc)) from exc

        image = encode_raster(png_bytes, css_width, oversampling, self.image_format, self.quality)
        logger.info(
            f"Captured {tree.label}: {image.width_px}x{image.height_px}px "
            f"{image.format} ({len(image.data)} bytes)"
        )
        return image
