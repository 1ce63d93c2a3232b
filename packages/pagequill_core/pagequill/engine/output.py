"""

Output model - raster captures and the paginated document built from them.

"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(slots=True)
class RasterImage:
    """Single bitmap capture of a content tree, encoded for embedding."""
    data: bytes
    format: str
    width_px: int
    height_px: int
    oversampling: float = 2.0

    @property
    def logical_width_px(self) -> float:
        return self.width_px / self.oversampling

    @property
    def logical_height_px(self) -> float:
        return self.height_px / self.oversampling

    def height_in_points(self, target_width_pt: float) -> float:
        """Height of the image when scaled to ``target_width_pt``."""
        return self.height_px * target_width_pt / self.width_px


@dataclass(slots=True)
class PagePlacement:
    """Where an image is drawn on a page.

    ``y_offset`` is measured from the top of the clip box, growing downwards,
    so the n-th tile of a tall image has a negative offset.
    """
    image: RasterImage
    x: float
    y_offset: float
    width: float
    height: float
    clip: Tuple[float, float, float, float]  # x, top, width, height


@dataclass(slots=True)
class OutputPage:
    number: int
    placement: PagePlacement
    visible_range: Tuple[float, float] = (0.0, 0.0)


@dataclass
class OutputDocument:
    """Ordered pages ready to be written as PDF."""
    page_width: float
    page_height: float
    pages: List[OutputPage] = field(default_factory=list)
    title: Optional[str] = None

    def add_page(self, placement: PagePlacement, visible_range: Tuple[float, float] = (0.0, 0.0)) -> OutputPage:
        page = OutputPage(number=len(self.pages) + 1, placement=placement, visible_range=visible_range)
        self.pages.append(page)
        return page

    @property
    def page_count(self) -> int:
        return len(self.pages)
