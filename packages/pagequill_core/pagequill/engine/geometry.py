"""

Page geometry - maps the logical (CSS pixel) layout onto physical PDF pages.

The content tree is laid out at a fixed authoring width (e.g. 800px). The PDF
page has a printable content box of (width - 2*margin) x (height - 2*margin)
points. The scale factor between both spaces determines how many CSS pixels
of content fit on one page: the logical page height.

"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

from reportlab.lib import pagesizes

from ..exceptions import GeometryError

if TYPE_CHECKING:
    from ..config import PaginationOptions


PAGE_FORMATS = {
    "a3": pagesizes.A3,
    "a4": pagesizes.A4,
    "a5": pagesizes.A5,
    "letter": pagesizes.LETTER,
    "legal": pagesizes.LEGAL,
}


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """Immutable geometry of one pagination run (points and CSS pixels)."""

    page_width: float
    page_height: float
    margin: float
    logical_width: float
    scale: float
    logical_page_height: float

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_height(self) -> float:
        return self.page_height - 2 * self.margin

    @property
    def page_size(self) -> Tuple[float, float]:
        return (self.page_width, self.page_height)

    def px_to_pt(self, value_px: float) -> float:
        """Convert logical pixels to points."""
        return value_px * self.scale

    def pt_to_px(self, value_pt: float) -> float:
        """Convert points to logical pixels."""
        return value_pt / self.scale

    @classmethod
    def from_options(cls, options: "PaginationOptions") -> "PageGeometry":
        width, height = resolve_page_size(options.page_format, options.orientation)
        return compute_page_geometry(width, height, options.margin_pt, options.logical_width_px)


def resolve_page_size(page_format: str, orientation: str = "portrait") -> Tuple[float, float]:
    """

    Resolve a named page format to (width, height) in points.

    Args:
    page_format: Format name ("a4", "letter", ...), case-insensitive
    orientation: "portrait" or "landscape"

    Returns:
    Tuple (width, height)

    """
    size = PAGE_FORMATS.get(str(page_format).lower())
    if size is None:
        raise GeometryError("Unknown page format", f"{page_format!r} (known: {', '.join(sorted(PAGE_FORMATS))})")
    if orientation == "landscape":
        return pagesizes.landscape(size)
    if orientation == "portrait":
        return pagesizes.portrait(size)
    raise GeometryError("Unknown orientation", repr(orientation))


def compute_page_geometry(
    page_width: float,
    page_height: float,
    margin: float,
    logical_width: float,
) -> PageGeometry:
    """

    Derive the scale factor and logical page height.

    scale = (page_width - 2*margin) / logical_width
    logical_page_height = (page_height - 2*margin) / scale

    Args:
    page_width: Physical page width in points
    page_height: Physical page height in points
    margin: Uniform margin in points
    logical_width: Authoring width of the content tree in CSS pixels

    Returns:
    PageGeometry

    Raises:
    GeometryError: For degenerate input (margins consuming the page,
    non-positive width, non-finite numbers)

    """
    values = (page_width, page_height, margin, logical_width)
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        raise GeometryError("Page geometry inputs must be finite numbers", repr(values))
    if logical_width <= 0:
        raise GeometryError("Logical width must be positive", str(logical_width))
    if margin < 0:
        raise GeometryError("Margin cannot be negative", str(margin))
    if 2 * margin >= page_width or 2 * margin >= page_height:
        raise GeometryError(
            "Margin leaves no printable area",
            f"margin={margin}pt, page={page_width}x{page_height}pt",
        )

    scale = (page_width - 2 * margin) / logical_width
    logical_page_height = (page_height - 2 * margin) / scale
    return PageGeometry(
        page_width=float(page_width),
        page_height=float(page_height),
        margin=float(margin),
        logical_width=float(logical_width),
        scale=scale,
        logical_page_height=logical_page_height,
    )
