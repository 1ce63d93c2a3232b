"""

Page Tiler - spreads one tall raster capture over fixed-size pages.

The bitmap itself is never sliced. Every page draws the *same full image*,
shifted up by one content-box height per page, and the page's clip rectangle
(the content box inside the margins) reveals only that page's vertical slice.
The image is embedded once and referenced by each page.

"""

import logging
import math
from typing import List, Optional, Sequence

from ..exceptions import GeometryError
from .geometry import PageGeometry
from .output import OutputDocument, PagePlacement, RasterImage

logger = logging.getLogger(__name__)

# Remaining heights at or below this (pt) do not start a new page.
TRAILING_EPSILON_PT = 0.5


class PageTiler:
    """Converts a RasterImage into an OutputDocument of tiled pages."""

    def __init__(self, epsilon: float = TRAILING_EPSILON_PT):
        self.epsilon = epsilon

    def tile(self, image: RasterImage, geometry: PageGeometry, title: Optional[str] = None) -> OutputDocument:
        """
        Tile the image across as many pages as its height requires.

        Args:
            image: Captured content tree
            geometry: Page geometry of this run
            title: Optional document title

        Returns:
            OutputDocument with one page per content-box height
        """
        if image.width_px <= 0 or image.height_px <= 0:
            raise GeometryError("Cannot tile an empty image", f"{image.width_px}x{image.height_px}px")

        content_width = geometry.content_width
        content_height = geometry.content_height
        image_height_pt = image.height_in_points(content_width)
        clip = (geometry.margin, geometry.margin, content_width, content_height)

        document = OutputDocument(
            page_width=geometry.page_width,
            page_height=geometry.page_height,
            title=title,
        )

        remaining = image_height_pt
        page_index = 0
        while remaining > self.epsilon:
            start = page_index * content_height
            end = min(start + content_height, image_height_pt)
            placement = PagePlacement(
                image=image,
                x=geometry.margin,
                y_offset=-start,
                width=content_width,
                height=image_height_pt,
                clip=clip,
            )
            document.add_page(placement, visible_range=(start, end))
            remaining -= content_height
            page_index += 1

        logger.info(
            f"Tiled {image.width_px}x{image.height_px}px capture "
            f"({image_height_pt:.1f}pt) onto {document.page_count} page(s)"
        )
        return document

    @staticmethod
    def expected_page_count(image_height_pt: float, content_height_pt: float) -> int:
        return max(math.ceil(image_height_pt / content_height_pt), 0)


def visible_ranges(document: OutputDocument) -> List[tuple]:
    """Per-page visible slices, in image points."""
    return [page.visible_range for page in document.pages]


def covers_continuously(ranges: Sequence[tuple], total: float, tolerance: float = 1e-6) -> bool:
    """True when ``ranges`` cover [0, total) end to end without gaps or overlap."""
    cursor = 0.0
    for start, end in ranges:
        if abs(start - cursor) > tolerance or end < start:
            return False
        cursor = end
    return abs(cursor - total) <= tolerance
