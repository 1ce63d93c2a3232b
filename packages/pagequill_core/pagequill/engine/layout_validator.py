"""

Layout Validator - checks the no-split invariant of atomic blocks.

Checks:
- whether any block straddles a logical page boundary (error)
- whether any block is taller than one logical page (warning, accepted overflow)
- whether block heights are sane (warning)

"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable, List, Tuple

if TYPE_CHECKING:
    from .block_adjuster import AtomicBlock

# absorbs float noise when a block starts exactly on a boundary
BOUNDARY_EPSILON_PX = 1e-6


def page_span(top: float, height: float, logical_page_height: float) -> Tuple[int, int]:
    """Return (start_page, end_page) covered by [top, top + height)."""
    start_page = math.floor((top + BOUNDARY_EPSILON_PX) / logical_page_height)
    end_page = math.floor((top + height - 1) / logical_page_height)
    return start_page, end_page


class LayoutValidator:
    """Validates measured or planned block positions against page boundaries."""

    def __init__(self, blocks: Iterable["AtomicBlock"], logical_page_height: float):
        """
        Args:
            blocks: Atomic blocks (planned ``final_top`` is used when set)
            logical_page_height: Page height in CSS pixels
        """
        self.blocks = list(blocks)
        self.logical_page_height = logical_page_height
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate(self) -> tuple[bool, List[str], List[str]]:
        """

        Performs full validation.

        Returns:
        Tuple (is_valid, errors, warnings)

        """
        self.errors.clear()
        self.warnings.clear()

        self._validate_heights()
        self._validate_overflow()
        self._validate_boundaries()

        is_valid = len(self.errors) == 0
        return is_valid, self.errors.copy(), self.warnings.copy()

    def _validate_heights(self) -> None:
        for block in self.blocks:
            if block.height <= 0:
                self.warnings.append(f"Block {block.index} has no height ({block.height}px)")

    def _validate_overflow(self) -> None:
        for block in self.blocks:
            if block.height > self.logical_page_height:
                self.warnings.append(
                    f"Block {block.index} is taller than one page "
                    f"({block.height:.1f}px > {self.logical_page_height:.1f}px)"
                )

    def _validate_boundaries(self) -> None:
        h = self.logical_page_height
        for block in self.blocks:
            if block.height <= 0 or block.height > h:
                continue
            top = block.effective_top
            start_page, end_page = page_span(top, block.height, h)
            if start_page != end_page:
                self.errors.append(
                    f"Block {block.index} crosses page boundary {end_page} "
                    f"(top={top:.1f}px, height={block.height:.1f}px)"
                )
