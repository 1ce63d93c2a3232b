"""
Pagination options.

Handles the configuration record consumed by every renderer: output file name,
page format and orientation, margins, oversampling, the logical authoring width
and the tuning knobs of the readiness barrier, block adjuster and remote service.
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_URL = "https://latex-pdf-agent.vercel.app/api/generate-pdf"

RENDERERS = ("local", "multi_unit", "remote")
ORIENTATIONS = ("portrait", "landscape")
IMAGE_FORMATS = ("JPEG", "PNG")
ADJUST_MODES = ("cascade", "single_pass")

# camelCase names used by browser callers
_ALIASES = {
    "pageFormat": "page_format",
    "format": "page_format",
    "marginPt": "margin_pt",
    "margin": "margin_pt",
    "logicalReferenceWidthPx": "logical_width_px",
    "logicalWidthPx": "logical_width_px",
    "blockSelector": "block_selector",
    "unitSelector": "unit_selector",
    "imageFormat": "image_format",
    "jpegQuality": "jpeg_quality",
    "remoteUrl": "remote_url",
}


@dataclass
class PaginationOptions:
    """Options for a single pagination job."""

    filename: str = "document.pdf"
    orientation: str = "portrait"
    page_format: str = "a4"
    margin_pt: float = 40.0
    oversampling: float = 2.0
    logical_width_px: int = 800

    renderer: str = "local"
    block_selector: str = ".print-item"
    unit_selector: Optional[str] = None
    suppress_selectors: Tuple[str, ...] = (".speaker-notes",)

    image_format: str = "JPEG"
    jpeg_quality: int = 95
    preserve_aspect: bool = False

    buffer_px: float = 5.0
    adjust_mode: str = "cascade"
    max_layout_passes: int = 3

    font_timeout_s: float = 5.0
    settle_delay_s: float = 0.3

    remote_url: str = DEFAULT_REMOTE_URL
    remote_timeout_s: float = 60.0

    headless: bool = True
    navigation_timeout_ms: int = 30000
    title: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_landscape(self) -> bool:
        return self.orientation == "landscape"

    def validate(self) -> "PaginationOptions":
        """
        Check option values.

        Returns:
            self, to allow chaining

        Raises:
            ConfigurationError: If any option is out of range
        """
        if self.orientation not in ORIENTATIONS:
            raise ConfigurationError("Invalid orientation", f"{self.orientation!r} not in {ORIENTATIONS}")
        if self.renderer not in RENDERERS:
            raise ConfigurationError("Invalid renderer", f"{self.renderer!r} not in {RENDERERS}")
        if self.image_format not in IMAGE_FORMATS:
            raise ConfigurationError("Invalid image format", f"{self.image_format!r} not in {IMAGE_FORMATS}")
        if self.adjust_mode not in ADJUST_MODES:
            raise ConfigurationError("Invalid adjust mode", f"{self.adjust_mode!r} not in {ADJUST_MODES}")
        if self.oversampling <= 0:
            raise ConfigurationError("Oversampling must be positive", str(self.oversampling))
        if self.logical_width_px <= 0:
            raise ConfigurationError("Logical width must be positive", str(self.logical_width_px))
        if self.margin_pt < 0:
            raise ConfigurationError("Margin cannot be negative", str(self.margin_pt))
        if not 1 <= self.jpeg_quality <= 100:
            raise ConfigurationError("JPEG quality must be within 1..100", str(self.jpeg_quality))
        if self.max_layout_passes < 1:
            raise ConfigurationError("At least one layout pass is required", str(self.max_layout_passes))
        if self.renderer == "multi_unit" and not self.unit_selector:
            raise ConfigurationError("The multi_unit renderer needs a unit selector")
        if not self.filename:
            raise ConfigurationError("Filename cannot be empty")
        return self

    def with_overrides(self, **overrides: Any) -> "PaginationOptions":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PaginationOptions":
        """
        Build options from a plain dictionary.

        Accepts both snake_case field names and the camelCase names used
        by browser callers. Unknown keys are kept in ``extra``.

        Args:
            data: Option values

        Returns:
            PaginationOptions instance
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in known and name != "extra":
                values[name] = value
            else:
                extra[key] = value

        if "suppress_selectors" in values and isinstance(values["suppress_selectors"], (list, str)):
            raw = values["suppress_selectors"]
            values["suppress_selectors"] = tuple(_split_list(raw) if isinstance(raw, str) else raw)
        if "image_format" in values:
            values["image_format"] = str(values["image_format"]).upper().replace("JPG", "JPEG")
        if "orientation" in values:
            values["orientation"] = _normalize_orientation(values["orientation"])

        if extra:
            logger.debug(f"Ignoring unknown pagination options: {sorted(extra)}")
        return cls(extra=extra, **values)

    @classmethod
    def from_env(cls, prefix: str = "PAGEQUILL_", base: Optional["PaginationOptions"] = None) -> "PaginationOptions":
        """
        Apply environment overrides, e.g. ``PAGEQUILL_MARGIN_PT=36``.

        Args:
            prefix: Environment variable prefix
            base: Options to start from (defaults to a fresh instance)

        Returns:
            PaginationOptions with overrides applied
        """
        options = base or cls()
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "extra":
                continue
            raw = os.getenv(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            current = getattr(options, f.name)
            try:
                overrides[f.name] = _coerce(raw, current)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid value for {prefix}{f.name.upper()}", raw) from exc
        if overrides:
            logger.debug(f"Environment overrides: {sorted(overrides)}")
        return replace(options, **overrides)


def _normalize_orientation(value: Any) -> str:
    token = str(value).lower()
    if token in ("p", "portrait"):
        return "portrait"
    if token in ("l", "landscape"):
        return "landscape"
    return token


def _split_list(raw: str) -> list:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _coerce(raw: str, current: Any) -> Any:
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    if isinstance(current, tuple):
        return tuple(_split_list(raw))
    if raw.strip() == "" and current is None:
        return None
    return raw
