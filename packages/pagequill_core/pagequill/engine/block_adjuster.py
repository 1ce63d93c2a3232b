"""

Block Layout Adjuster - keeps atomic blocks from straddling page boundaries.

There is no pagination engine behind the captured layout: the content tree is
rendered as one tall column and later sliced into pages of fixed logical
height. The adjuster nudges every atomic block that would be cut by a slice
boundary down to the start of the next page, by growing its top margin.

Only block placement is corrected. A block taller than one logical page can
never fit and is passed through unchanged (accepted overflow).

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from .layout_validator import LayoutValidator, page_span

if TYPE_CHECKING:
    from ..render.content_tree import ContentTree

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_PX = 5.0


@dataclass(slots=True)
class AtomicBlock:
    """Content unit that must not be split across a page boundary."""
    index: int
    top: float
    height: float
    margin_top: float = 0.0
    margin_adjustment: float = 0.0
    parent: Optional[int] = None  # index of the nearest enclosing atomic block
    final_top: Optional[float] = None

    @property
    def effective_top(self) -> float:
        return self.top if self.final_top is None else self.final_top

    @property
    def adjusted_margin_top(self) -> float:
        return self.margin_top + self.margin_adjustment


@dataclass(slots=True)
class BlockShift:
    """Margin change applied to one block."""
    index: int
    shift: float
    margin_top: float
    new_top: float


@dataclass
class AdjustmentReport:
    passes: int = 0
    shifts: List[BlockShift] = field(default_factory=list)
    overflow: List[int] = field(default_factory=list)
    remaining: List[int] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.remaining


def straddles(top: float, height: float, logical_page_height: float) -> bool:
    if height <= 0:
        return False
    start_page, end_page = page_span(top, height, logical_page_height)
    return start_page != end_page


class BlockLayoutAdjuster:
    """

    Shifts straddling atomic blocks onto the next logical page.

    Modes:
    - "cascade": each block is evaluated at its original top plus the shifts
      of every block above it (and of its enclosing blocks), i.e. the
      position it will actually have once earlier shifts push the flow down.
    - "single_pass": every block is evaluated at its original top, ignoring
      earlier shifts.

    """

    def __init__(
        self,
        buffer: float = DEFAULT_BUFFER_PX,
        mode: str = "cascade",
        block_selector: str = ".print-item",
        max_passes: int = 3,
    ):
        if mode not in ("cascade", "single_pass"):
            raise ValueError(f"Unknown adjust mode: {mode}")
        self.buffer = buffer
        self.mode = mode
        self.block_selector = block_selector
        self.max_passes = max(int(max_passes), 1)

    def plan(self, blocks: Iterable[AtomicBlock], logical_page_height: float) -> List[BlockShift]:
        """

        Compute margin shifts for the given blocks.

        Offsets are read once, before any mutation. Each block's
        ``margin_adjustment`` and ``final_top`` are updated in place.

        Args:
        blocks: Measured atomic blocks
        logical_page_height: Page height in CSS pixels

        Returns:
        List of shifts, in top-to-bottom order

        """
        if logical_page_height <= 0:
            raise ValueError("logical_page_height must be positive")

        ordered = sorted(blocks, key=lambda b: (b.top, b.index))
        applied: dict[int, Tuple[float, float]] = {}  # index -> (original top, shift)
        shifts: List[BlockShift] = []

        for block in ordered:
            carried = self._carried_shift(block, applied) if self.mode == "cascade" else 0.0
            top = block.top + carried
            block.final_top = top

            if not straddles(top, block.height, logical_page_height):
                continue

            if block.height > logical_page_height:
                logger.debug(
                    f"Block {block.index} is taller than a page "
                    f"({block.height:.1f}px > {logical_page_height:.1f}px), left unshifted"
                )
                continue

            start_page, _ = page_span(top, block.height, logical_page_height)
            boundary = (start_page + 1) * logical_page_height
            # buffer never pushes a block that fits on one page past the next boundary
            buffer = min(self.buffer, logical_page_height - block.height)
            new_top = boundary + buffer
            shift = new_top - top

            block.margin_adjustment += shift
            block.final_top = new_top
            applied[block.index] = (block.top, shift)
            shifts.append(
                BlockShift(
                    index=block.index,
                    shift=shift,
                    margin_top=block.adjusted_margin_top,
                    new_top=block.final_top,
                )
            )

        if shifts:
            logger.debug(f"Planned {len(shifts)} block shift(s) ({self.mode})")
        return shifts

    @staticmethod
    def _carried_shift(block: AtomicBlock, applied: dict) -> float:
        """Sum of shifts of blocks above ``block`` or enclosing it."""
        return sum(
            shift
            for index, (top, shift) in applied.items()
            if top < block.top or index == block.parent
        )

    async def adjust(self, tree: "ContentTree", logical_page_height: float) -> AdjustmentReport:
        """

        Adjust a detached clone in place.

        Measures the blocks, applies the planned margins and re-measures,
        repeating while blocks still straddle a boundary and passes remain.
        Only inline ``margin-top`` is changed.

        Args:
        tree: Detached clone of the content tree (never the live tree)
        logical_page_height: Page height in CSS pixels

        Returns:
        AdjustmentReport

        """
        report = AdjustmentReport()
        blocks = await tree.measure_blocks(self.block_selector)
        if not blocks:
            logger.debug(f"No atomic blocks matched {self.block_selector!r}")
            return report

        for pass_number in range(1, self.max_passes + 1):
            report.passes = pass_number
            shifts = self.plan(blocks, logical_page_height)
            if not shifts:
                break

            await tree.apply_block_shifts(shifts, self.block_selector)
            report.shifts.extend(shifts)

            blocks = await tree.measure_blocks(self.block_selector)
            is_valid, errors, _ = LayoutValidator(blocks, logical_page_height).validate()
            if is_valid:
                break
            logger.debug(f"Layout pass {pass_number}: {len(errors)} block(s) still straddle a page boundary")

        report.overflow = [b.index for b in blocks if b.height > logical_page_height]
        report.remaining = [
            b.index
            for b in blocks
            if b.height <= logical_page_height and straddles(b.top, b.height, logical_page_height)
        ]
        if report.remaining:
            logger.warning(f"{len(report.remaining)} block(s) still straddle a page boundary after {report.passes} pass(es)")
        logger.info(
            f"Block layout adjusted: {len(blocks)} blocks, {len(report.shifts)} shift(s), "
            f"{len(report.overflow)} overflow, {report.passes} pass(es)"
        )
        return report
