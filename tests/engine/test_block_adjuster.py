"""Tests for BlockLayoutAdjuster."""

import math

import pytest

from pagequill.engine.block_adjuster import AtomicBlock, BlockLayoutAdjuster, page_span, straddles
from pagequill.engine.geometry import compute_page_geometry
from pagequill.engine.layout_validator import LayoutValidator

H = compute_page_geometry(595, 842, 40, 800).logical_page_height


def blocks_from(layout):
    return [AtomicBlock(index=i, top=top, height=height) for i, (top, height) in enumerate(layout)]


class TestPageSpan:
    """Test suite for page span helpers."""

    def test_inside_one_page(self):
        assert page_span(10, 100, 1000) == (0, 0)
        assert not straddles(10, 100, 1000)

    def test_ending_exactly_on_boundary(self):
        assert not straddles(900, 100, 1000)

    def test_crossing_boundary(self):
        assert page_span(950, 100, 1000) == (0, 1)
        assert straddles(950, 100, 1000)

    def test_zero_height_never_straddles(self):
        assert not straddles(999.5, 0, 1000)


class TestPlan:
    """Test suite for the pure planning step."""

    def test_worked_example_shift(self):
        blocks = blocks_from([(1100, 150)])
        shifts = BlockLayoutAdjuster(buffer=5).plan(blocks, H)

        assert len(shifts) == 1
        assert shifts[0].shift == pytest.approx(88.689, abs=1e-3)
        assert blocks[0].margin_adjustment == pytest.approx(88.689, abs=1e-3)
        assert blocks[0].final_top == pytest.approx(H + 5)

    def test_adds_to_existing_margin(self):
        block = AtomicBlock(index=0, top=950, height=100, margin_top=12)
        shifts = BlockLayoutAdjuster(buffer=5).plan([block], 1000)

        assert shifts[0].margin_top == pytest.approx(12 + 55)

    def test_non_straddling_untouched(self):
        blocks = blocks_from([(0, 300), (400, 500)])
        shifts = BlockLayoutAdjuster().plan(blocks, 1000)

        assert shifts == []
        assert all(b.margin_adjustment == 0 for b in blocks)

    def test_overflow_passthrough(self):
        blocks = blocks_from([(500, 2500)])
        shifts = BlockLayoutAdjuster().plan(blocks, 1000)

        assert shifts == []
        assert blocks[0].margin_adjustment == 0

    def test_zero_height_ignored(self):
        blocks = blocks_from([(999, 0)])
        assert BlockLayoutAdjuster().plan(blocks, 1000) == []

    def test_sorted_by_original_top(self):
        blocks = blocks_from([(1950, 100), (950, 100)])
        shifts = BlockLayoutAdjuster(buffer=0, mode="single_pass").plan(blocks, 1000)

        assert [s.index for s in shifts] == [1, 0]

    def test_single_pass_ignores_earlier_shifts(self):
        # second block fits at its original top but not once the first one moved
        blocks = blocks_from([(950, 100), (1900, 80)])
        shifts = BlockLayoutAdjuster(buffer=5, mode="single_pass").plan(blocks, 1000)

        assert [s.index for s in shifts] == [0]

    def test_cascade_accounts_for_earlier_shifts(self):
        blocks = blocks_from([(950, 100), (1900, 80)])
        shifts = BlockLayoutAdjuster(buffer=5, mode="cascade").plan(blocks, 1000)

        assert [s.index for s in shifts] == [0, 1]
        assert blocks[1].final_top == pytest.approx(2005)

    def test_cascade_includes_enclosing_block(self):
        parent = AtomicBlock(index=0, top=950, height=200)
        child = AtomicBlock(index=1, top=950, height=50, parent=0)
        BlockLayoutAdjuster(buffer=5).plan([parent, child], 1000)

        assert child.final_top == pytest.approx(parent.final_top)

    def test_near_page_height_block_keeps_inside_page(self):
        blocks = blocks_from([(1100, H - 2)])
        shifts = BlockLayoutAdjuster(buffer=5).plan(blocks, H)

        assert shifts[0].shift == pytest.approx(H - 1100 + 2)
        assert not straddles(blocks[0].final_top, blocks[0].height, H)

    def test_full_page_block_lands_on_boundary(self):
        blocks = blocks_from([(1100, H)])
        BlockLayoutAdjuster(buffer=5).plan(blocks, H)

        assert blocks[0].final_top == pytest.approx(H)
        assert LayoutValidator(blocks, H).validate()[0]

    def test_children_of_overflowing_parent(self):
        parent = AtomicBlock(index=0, top=0, height=2500)
        children = [AtomicBlock(index=i, top=top, height=200, parent=0) for i, top in enumerate([300, 1100, 1700], start=1)]
        BlockLayoutAdjuster(buffer=5).plan([parent, *children], H)

        is_valid, errors, warnings = LayoutValidator([parent, *children], H).validate()
        assert is_valid, errors
        assert parent.margin_adjustment == 0
        assert len(warnings) == 1

    @pytest.mark.parametrize("seed", range(8))
    def test_no_split_invariant_in_flow(self, seed):
        # stacked blocks from short paragraphs up to a full page, 10px gaps
        near_page = [H, H - 0.5, H - 2, H - 4.9]
        heights = [
            near_page[(seed + i) % len(near_page)] if i % 7 == 3 else 40 + ((seed * 37 + i * 53) % int(H - 40))
            for i in range(40)
        ]
        layout, cursor = [], 0.0
        for height in heights:
            layout.append((cursor, height))
            cursor += height + 10
        blocks = blocks_from(layout)

        BlockLayoutAdjuster(buffer=5).plan(blocks, H)
        is_valid, errors, _ = LayoutValidator(blocks, H).validate()

        assert is_valid, errors

    def test_rejects_non_positive_page_height(self):
        with pytest.raises(ValueError):
            BlockLayoutAdjuster().plan(blocks_from([(0, 10)]), 0)

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            BlockLayoutAdjuster(mode="reflow")


class TestAdjust:
    """Test suite for in-browser adjustment on a (fake) clone."""

    @pytest.mark.asyncio
    async def test_adjust_reaches_valid_layout(self, fake_tree):
        adjuster = BlockLayoutAdjuster(buffer=5)
        report = await adjuster.adjust(fake_tree, H)

        assert report.is_clean
        assert report.passes == 1
        assert [s.index for s in report.shifts] == [1]
        assert fake_tree.extra_margins[1] == pytest.approx(88.689, abs=1e-3)

        measured = await fake_tree.measure_blocks(".print-item")
        assert LayoutValidator(measured, H).validate()[0]

    @pytest.mark.asyncio
    async def test_near_page_height_block_settles_in_one_pass(self, fake_tree_factory):
        tree = fake_tree_factory(blocks=[(1100, H - 2)])
        report = await BlockLayoutAdjuster(buffer=5).adjust(tree, H)

        assert report.passes == 1
        assert report.is_clean
        assert [s.shift for s in report.shifts] == [pytest.approx(H - 1098)]

    @pytest.mark.asyncio
    async def test_single_pass_needs_remeasure(self, fake_tree_factory):
        tree = fake_tree_factory(blocks=[(0, 100), (1150, 100), (2280, 80)])
        adjuster = BlockLayoutAdjuster(buffer=5, mode="single_pass", max_passes=3)

        report = await adjuster.adjust(tree, H)

        assert report.is_clean
        assert report.passes == 2

    @pytest.mark.asyncio
    async def test_overflow_reported(self, fake_tree_factory):
        tree = fake_tree_factory(blocks=[(100, 3000)])
        report = await BlockLayoutAdjuster().adjust(tree, H)

        assert report.overflow == [0]
        assert report.shifts == []

    @pytest.mark.asyncio
    async def test_no_blocks(self, fake_tree_factory):
        report = await BlockLayoutAdjuster().adjust(fake_tree_factory(), H)
        assert report.passes == 0
        assert report.is_clean
