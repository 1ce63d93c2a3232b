"""Base classes and interfaces for PDF renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..config import PaginationOptions
from ..engine.geometry import PageGeometry
from ..render.barrier import RenderReadinessBarrier
from ..render.browser import BrowserSession, ContentSource
from ..render.content_tree import ContentTree


class PdfRenderer(ABC):
    """Interface for pagination strategies."""

    name = "base"

    def __init__(self, options: Optional[PaginationOptions] = None, barrier: Optional[RenderReadinessBarrier] = None):
        self.options = (options or PaginationOptions()).validate()
        self.geometry = PageGeometry.from_options(self.options)
        self.barrier = barrier or RenderReadinessBarrier(
            font_timeout=self.options.font_timeout_s,
            settle_delay=self.options.settle_delay_s,
        )

    async def render(self, source: ContentSource) -> bytes:
        """Load ``source`` in a fresh browser and paginate it."""
        async with BrowserSession(self.options) as session:
            page = await session.open(source)
            tree = await ContentTree.locate(page, source.selector)
            return await self.render_tree(tree)

    @abstractmethod
    async def render_tree(self, tree: ContentTree) -> bytes:
        """Paginate an already loaded content tree into PDF bytes."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.options.filename!r})"
