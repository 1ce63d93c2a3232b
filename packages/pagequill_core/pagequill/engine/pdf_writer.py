"""PDF writer - renders an OutputDocument with ReportLab."""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Union

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..version import __version__
from .output import OutputDocument, OutputPage, RasterImage

logger = logging.getLogger(__name__)


class PdfDocumentWriter:
    """Writes tiled or per-unit pages to PDF bytes.

    Each page clips to its placement's clip box before drawing, so a tall
    image repeated on several pages only shows the slice meant for that page.
    """

    def __init__(self, author: Optional[str] = None, creator: str = "PageQuill"):
        self.author = author
        self.creator = creator

    def write(self, document: OutputDocument) -> bytes:
        """Render the document and return the PDF bytes.

        Args:
            document: Paginated document

        Returns:
            PDF file contents

        Raises:
            ValueError: If the document has no pages
        """
        if not document.pages:
            raise ValueError("OutputDocument has no pages")

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(document.page_width, document.page_height))
        c.setCreator(f"{self.creator} {__version__}")
        c.setProducer(f"{self.creator} {__version__} (ReportLab)")
        if document.title:
            c.setTitle(document.title)
        if self.author:
            c.setAuthor(self.author)

        readers: Dict[int, ImageReader] = {}
        for page in document.pages:
            c.setPageSize((document.page_width, document.page_height))
            self._render_page(c, document, page, readers)
            c.showPage()
        c.save()

        data = buffer.getvalue()
        logger.debug(f"PDF written in memory: {document.page_count} page(s), {len(data)} bytes")
        return data

    def write_to(self, document: OutputDocument, output_path: Union[str, Path]) -> Path:
        """Render the document and save it to ``output_path``."""
        data = self.write(document)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        logger.info(f"PDF saved as {output_path} ({datetime.now():%H:%M:%S})")
        return output_path

    @staticmethod
    def _reader_for(image: RasterImage, readers: Dict[int, ImageReader]) -> ImageReader:
        key = id(image)
        if key not in readers:
            readers[key] = ImageReader(BytesIO(image.data))
        return readers[key]

    def _render_page(
        self,
        c: canvas.Canvas,
        document: OutputDocument,
        page: OutputPage,
        readers: Dict[int, ImageReader],
    ) -> None:
        placement = page.placement
        page_height = document.page_height
        clip_x, clip_top, clip_width, clip_height = placement.clip

        c.saveState()
        path = c.beginPath()
        path.rect(clip_x, page_height - clip_top - clip_height, clip_width, clip_height)
        c.clipPath(path, stroke=0, fill=0)

        # PDF origin is bottom-left; y_offset is top-relative inside the clip box
        image_bottom = page_height - (clip_top + placement.y_offset) - placement.height
        c.drawImage(
            self._reader_for(placement.image, readers),
            placement.x,
            image_bottom,
            width=placement.width,
            height=placement.height,
        )
        c.restoreState()
