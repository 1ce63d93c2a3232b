"""
Local tiled renderer - the primary document path.

barrier -> detached clone -> barrier -> block adjustment -> capture ->
tiling -> PDF. The live tree is only read; every mutation happens on the
clone, which is removed again however the job ends.
"""

import logging
from typing import Optional

from ..config import PaginationOptions
from ..engine.block_adjuster import BlockLayoutAdjuster
from ..engine.geometry import PageGeometry, compute_page_geometry
from ..engine.page_tiler import PageTiler
from ..engine.pdf_writer import PdfDocumentWriter
from ..render.barrier import RenderReadinessBarrier
from ..render.content_tree import ContentTree, browser_errors
from ..render.rasterizer import Rasterizer
from .base import PdfRenderer

logger = logging.getLogger(__name__)

# clone widths within this many CSS px of the authoring width keep the run geometry
WIDTH_TOLERANCE_PX = 0.5


class LocalTiledRenderer(PdfRenderer):
    """Renders one tall capture tiled across fixed-size pages."""

    name = "local"

    def __init__(
        self,
        options: Optional[PaginationOptions] = None,
        barrier: Optional[RenderReadinessBarrier] = None,
        adjuster: Optional[BlockLayoutAdjuster] = None,
        rasterizer: Optional[Rasterizer] = None,
        tiler: Optional[PageTiler] = None,
        writer: Optional[PdfDocumentWriter] = None,
    ):
        super().__init__(options, barrier)
        opts = self.options
        self.adjuster = adjuster or BlockLayoutAdjuster(
            buffer=opts.buffer_px,
            mode=opts.adjust_mode,
            block_selector=opts.block_selector,
            max_passes=opts.max_layout_passes,
        )
        self.rasterizer = rasterizer or Rasterizer(
            image_format=opts.image_format,
            quality=opts.jpeg_quality,
            block_selector=opts.block_selector,
        )
        self.tiler = tiler or PageTiler()
        self.writer = writer or PdfDocumentWriter()
        self.last_report = None

    async def render_tree(self, tree: ContentTree) -> bytes:
        opts = self.options
        geometry = self.geometry
        logger.info(
            f"Rendering {tree.label} as {opts.page_format}/{opts.orientation}: "
            f"scale={geometry.scale:.5f}, logical page height={geometry.logical_page_height:.2f}px"
        )

        await self.barrier.ensure_ready(tree)
        async with tree.detached_clone(opts.logical_width_px) as clone:
            await self.barrier.ensure_ready(clone)
            geometry = await self._geometry_for(clone, geometry)
            self.last_report = await self.adjuster.adjust(clone, geometry.logical_page_height)
            image = await self.rasterizer.capture(clone, opts.oversampling)

        document = self.tiler.tile(image, geometry, title=opts.title)
        return self.writer.write(document)

    async def _geometry_for(self, clone: ContentTree, geometry: PageGeometry) -> PageGeometry:
        """Rebuild the geometry when the clone did not lay out at the authoring width."""
        with browser_errors("measure width of", clone.label):
            width = await clone.css_width()
        if width <= 0 or abs(width - geometry.logical_width) <= WIDTH_TOLERANCE_PX:
            return geometry
        logger.warning(
            f"{clone.label} laid out at {width:.2f}px instead of {geometry.logical_width:.2f}px; "
            f"paginating at the measured width"
        )
        return compute_page_geometry(geometry.page_width, geometry.page_height, geometry.margin, width)
