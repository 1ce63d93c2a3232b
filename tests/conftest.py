"""
Pytest configuration for PageQuill
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest
from PIL import Image

from pagequill.config import PaginationOptions
from pagequill.engine.block_adjuster import AtomicBlock
from pagequill.render.content_tree import TypesetResult


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid stray rich handlers."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


def make_png(width: int, height: int, color=(30, 60, 90, 255), mode: str = "RGBA") -> bytes:
    """Encode a solid PNG of the given size."""
    image = Image.new(mode, (width, height), color if mode == "RGBA" else color[:3])
    out = BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


class FakeContentTree:
    """
    In-memory stand-in for a browser-backed ContentTree.

    Blocks are (top, height) pairs in normal vertical flow: raising the top
    margin of a block pushes that block and every block below it down.
    """

    def __init__(
        self,
        blocks: Sequence[Tuple[float, float]] = (),
        width: float = 800.0,
        height: Optional[float] = None,
        label: str = "content",
        container_id: Optional[str] = None,
        device_pixel_ratio: float = 2.0,
        typeset_results: Sequence[TypesetResult] = (),
        font_delay: float = 0.0,
        unit_count: int = 0,
        attached: bool = True,
        html: str = "<p>content</p>",
    ):
        self.base_blocks = [(float(t), float(h)) for t, h in blocks]
        self.extra_margins = {}
        self.width = width
        self._height = height
        self.label = label
        self.container_id = container_id
        self.device_pixel_ratio = device_pixel_ratio
        self.typeset_results = list(typeset_results)
        self.typeset_calls = 0
        self.font_delay = font_delay
        self.unit_count = unit_count
        self.attached = attached
        self.html = html

        self.clones: List["FakeContentTree"] = []
        self.removed_containers: List[str] = []
        self.installed_styles: List[str] = []
        self.active_styles: List[str] = []
        self.visible = False
        self.visibility_log: List[str] = []
        self.screenshots = 0
        self.extra_css: Optional[str] = None

    @property
    def scope_selector(self) -> Optional[str]:
        return f"#{self.container_id}" if self.container_id else None

    @property
    def content_height(self) -> float:
        if self._height is not None:
            return self._height + sum(self.extra_margins.values())
        if not self.base_blocks:
            return 100.0
        return max(top + height for top, height in self._positions())

    def _positions(self) -> List[Tuple[float, float]]:
        positions = []
        for index, (top, height) in enumerate(self.base_blocks):
            pushed = sum(
                extra
                for other, extra in self.extra_margins.items()
                if self.base_blocks[other][0] <= top
            )
            positions.append((top + pushed, height))
        return positions

    async def is_attached(self) -> bool:
        return self.attached

    async def css_width(self) -> float:
        return self.width

    async def inner_html(self) -> str:
        return self.html

    async def outer_html(self) -> str:
        return f'<div class="unit">{self.html}</div>'

    async def typeset(self) -> TypesetResult:
        self.typeset_calls += 1
        if self.typeset_results:
            return self.typeset_results.pop(0)
        return TypesetResult(engine="katex", rendered=1, pending=False)

    async def wait_for_fonts(self) -> str:
        if self.font_delay:
            await asyncio.sleep(self.font_delay)
        return "loaded"

    @asynccontextmanager
    async def detached_clone(self, width_px: float, extra_css: Optional[str] = None):
        container_id = f"pq-capture-{len(self.clones):012x}"
        clone = FakeContentTree(
            blocks=self.base_blocks,
            width=width_px,
            height=self._height,
            label=f"{self.label} (clone)",
            container_id=container_id,
            device_pixel_ratio=self.device_pixel_ratio,
            unit_count=self.unit_count,
            html=self.html,
        )
        clone.extra_css = extra_css
        self.clones.append(clone)
        try:
            yield clone
        finally:
            self.removed_containers.append(container_id)

    @asynccontextmanager
    async def scoped_styles(self, css: str):
        self.installed_styles.append(css)
        self.active_styles.append(css)
        try:
            yield
        finally:
            self.active_styles.remove(css)

    async def measure_blocks(self, selector: str) -> List[AtomicBlock]:
        return [
            AtomicBlock(index=index, top=top, height=height, margin_top=self.extra_margins.get(index, 0.0))
            for index, (top, height) in enumerate(self._positions())
        ]

    async def apply_block_shifts(self, shifts, selector: str = ".print-item") -> int:
        for shift in shifts:
            self.extra_margins[shift.index] = shift.margin_top
        return len(shifts)

    async def units(self, selector: str) -> List["FakeContentTree"]:
        return [
            FakeContentTree(
                width=self.width,
                height=450.0,
                label=f"{selector}[{i}]",
                container_id=self.container_id,
                device_pixel_ratio=self.device_pixel_ratio,
                html=f"<section>unit {i}</section>",
            )
            for i in range(self.unit_count)
        ]

    async def screenshot(self) -> bytes:
        self.screenshots += 1
        self.visibility_log.append("visible" if self.visible else "hidden")
        width = int(round(self.width * self.device_pixel_ratio))
        height = int(round(self.content_height * self.device_pixel_ratio))
        return make_png(width, height)

    async def show_container(self) -> Optional[str]:
        if not self.container_id:
            return None
        self.visible = True
        return "visibility: hidden;"

    async def restore_container(self, css_text: str) -> None:
        self.visible = False


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    return tmp_path


@pytest.fixture
def fake_tree_factory():
    """Build FakeContentTree instances."""
    return FakeContentTree


@pytest.fixture
def fake_tree():
    """Content tree with three blocks, the second straddling the first A4 page break."""
    return FakeContentTree(blocks=[(0, 400), (1100, 150), (1300, 200)])


@pytest.fixture
def fast_options() -> PaginationOptions:
    """Options with the barrier delays removed."""
    return PaginationOptions(font_timeout_s=0.5, settle_delay_s=0.0)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    logging.raiseExceptions = False
