"""
Multi-unit assembler - one page per self-contained unit (e.g. a slide).

No tiling and no block adjustment: each unit is captured on its own and
stretched onto its own page.
"""

import logging
from typing import List, Optional, Sequence

from ..config import PaginationOptions
from ..engine.geometry import PageGeometry
from ..engine.output import OutputDocument, PagePlacement, RasterImage
from ..engine.pdf_writer import PdfDocumentWriter
from ..exceptions import CaptureTargetMissing
from ..render.barrier import RenderReadinessBarrier
from ..render.capture_styles import build_suppression_css
from ..render.content_tree import ContentTree
from ..render.rasterizer import Rasterizer
from .base import PdfRenderer

logger = logging.getLogger(__name__)


def layout_pages(
    images: Sequence[RasterImage],
    geometry: PageGeometry,
    preserve_aspect: bool = False,
    title: Optional[str] = None,
) -> OutputDocument:
    """
    Place one image per page inside the content box.

    Args:
        images: Unit captures, in document order
        geometry: Page geometry (margin may be 0)
        preserve_aspect: Fit and centre instead of stretching
        title: Optional document title

    Returns:
        OutputDocument with ``len(images)`` pages
    """
    document = OutputDocument(page_width=geometry.page_width, page_height=geometry.page_height, title=title)
    box_w = geometry.content_width
    box_h = geometry.content_height
    clip = (geometry.margin, geometry.margin, box_w, box_h)

    for image in images:
        x, y, width, height = geometry.margin, 0.0, box_w, box_h
        if preserve_aspect and image.width_px > 0 and image.height_px > 0:
            ratio = min(box_w / image.width_px, box_h / image.height_px)
            width = image.width_px * ratio
            height = image.height_px * ratio
            x = geometry.margin + (box_w - width) / 2
            y = (box_h - height) / 2
        placement = PagePlacement(image=image, x=x, y_offset=y, width=width, height=height, clip=clip)
        document.add_page(placement, visible_range=(0.0, height))
    return document


class MultiUnitAssembler:
    """Captures units one by one and lays them out one per page."""

    def __init__(self, barrier: RenderReadinessBarrier, rasterizer: Rasterizer, oversampling: float = 2.0):
        self.barrier = barrier
        self.rasterizer = rasterizer
        self.oversampling = oversampling

    async def capture_units(self, units: Sequence[ContentTree]) -> List[RasterImage]:
        images = []
        for number, unit in enumerate(units, start=1):
            await self.barrier.ensure_ready(unit)
            images.append(await self.rasterizer.capture(unit, self.oversampling))
            logger.debug(f"Captured unit {number}/{len(units)}")
        return images

    async def assemble_units(
        self,
        units: Sequence[ContentTree],
        geometry: PageGeometry,
        preserve_aspect: bool = False,
        title: Optional[str] = None,
    ) -> OutputDocument:
        if not units:
            raise CaptureTargetMissing("No units to assemble")
        images = await self.capture_units(units)
        document = layout_pages(images, geometry, preserve_aspect=preserve_aspect, title=title)
        logger.info(f"Assembled {document.page_count} unit page(s)")
        return document


class MultiUnitRenderer(PdfRenderer):
    """Slide-deck style renderer: every unit becomes exactly one page."""

    name = "multi_unit"

    def __init__(
        self,
        options: Optional[PaginationOptions] = None,
        barrier: Optional[RenderReadinessBarrier] = None,
        rasterizer: Optional[Rasterizer] = None,
        writer: Optional[PdfDocumentWriter] = None,
    ):
        super().__init__(options, barrier)
        opts = self.options
        self.rasterizer = rasterizer or Rasterizer(
            image_format=opts.image_format,
            quality=opts.jpeg_quality,
            block_selector=None,
        )
        self.assembler = MultiUnitAssembler(self.barrier, self.rasterizer, opts.oversampling)
        self.writer = writer or PdfDocumentWriter()

    async def render_tree(self, tree: ContentTree) -> bytes:
        opts = self.options
        await self.barrier.ensure_ready(tree)

        suppression = build_suppression_css("{scope}", opts.suppress_selectors) or None
        async with tree.detached_clone(opts.logical_width_px, extra_css=suppression) as clone:
            units = await clone.units(opts.unit_selector)
            if not units:
                raise CaptureTargetMissing("No units found", f"{opts.unit_selector!r} in {tree.label}")
            logger.info(f"Found {len(units)} unit(s) matching {opts.unit_selector!r}")
            document = await self.assembler.assemble_units(
                units, self.geometry, preserve_aspect=opts.preserve_aspect, title=opts.title
            )

        return self.writer.write(document)
