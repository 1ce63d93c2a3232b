"""
Layout engine: page geometry, atomic block adjustment, tiling and PDF output.
"""

from .block_adjuster import AdjustmentReport, AtomicBlock, BlockLayoutAdjuster, BlockShift
from .geometry import PageGeometry, compute_page_geometry, resolve_page_size
from .layout_validator import LayoutValidator
from .output import OutputDocument, OutputPage, PagePlacement, RasterImage
from .page_tiler import PageTiler
from .pdf_writer import PdfDocumentWriter

__all__ = [
    "AdjustmentReport",
    "AtomicBlock",
    "BlockLayoutAdjuster",
    "BlockShift",
    "LayoutValidator",
    "OutputDocument",
    "OutputPage",
    "PageGeometry",
    "PagePlacement",
    "PageTiler",
    "PdfDocumentWriter",
    "RasterImage",
    "compute_page_geometry",
    "resolve_page_size",
]
