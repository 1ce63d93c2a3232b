"""Tests for PaginationOptions."""

import pytest

from pagequill.config import DEFAULT_REMOTE_URL, PaginationOptions
from pagequill.exceptions import ConfigurationError


class TestPaginationOptions:
    """Test suite for PaginationOptions."""

    def test_defaults(self):
        options = PaginationOptions()

        assert options.filename == "document.pdf"
        assert options.page_format == "a4"
        assert options.margin_pt == 40.0
        assert options.oversampling == 2.0
        assert options.logical_width_px == 800
        assert options.block_selector == ".print-item"
        assert options.remote_url == DEFAULT_REMOTE_URL
        assert options.validate() is options

    @pytest.mark.parametrize("overrides", [
        {"orientation": "sideways"},
        {"renderer": "pdfkit"},
        {"image_format": "GIF"},
        {"oversampling": 0},
        {"logical_width_px": 0},
        {"margin_pt": -1},
        {"jpeg_quality": 0},
        {"max_layout_passes": 0},
        {"adjust_mode": "reflow"},
        {"renderer": "multi_unit"},
        {"filename": ""},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ConfigurationError):
            PaginationOptions(**overrides).validate()

    def test_from_dict_aliases(self):
        options = PaginationOptions.from_dict({
            "filename": "Algebra-notes.pdf",
            "orientation": "l",
            "pageFormat": "letter",
            "marginPt": 36,
            "logicalReferenceWidthPx": 1024,
            "imageFormat": "jpg",
            "theme": "dark",
        })

        assert options.orientation == "landscape"
        assert options.page_format == "letter"
        assert options.margin_pt == 36
        assert options.logical_width_px == 1024
        assert options.image_format == "JPEG"
        assert options.extra == {"theme": "dark"}

    def test_from_dict_empty(self):
        assert PaginationOptions.from_dict(None) == PaginationOptions()

    def test_from_dict_suppress_string(self):
        options = PaginationOptions.from_dict({"suppress_selectors": ".notes, .hint"})
        assert options.suppress_selectors == (".notes", ".hint")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PAGEQUILL_MARGIN_PT", "24")
        monkeypatch.setenv("PAGEQUILL_HEADLESS", "false")
        monkeypatch.setenv("PAGEQUILL_MAX_LAYOUT_PASSES", "5")
        monkeypatch.setenv("PAGEQUILL_SUPPRESS_SELECTORS", ".a,.b")

        options = PaginationOptions.from_env()

        assert options.margin_pt == 24.0
        assert options.headless is False
        assert options.max_layout_passes == 5
        assert options.suppress_selectors == (".a", ".b")

    def test_from_env_invalid(self, monkeypatch):
        monkeypatch.setenv("PAGEQUILL_OVERSAMPLING", "lots")
        with pytest.raises(ConfigurationError):
            PaginationOptions.from_env()

    def test_with_overrides_copies(self):
        base = PaginationOptions()
        changed = base.with_overrides(orientation="landscape")

        assert base.orientation == "portrait"
        assert changed.is_landscape
