"""
Capture-time style patches.

Some KaTeX constructs draw fraction bars and radicals as zero-height boxes with
a border, which does not survive rasterization at capture resolution. The
patches replace them with solid bars in the current text colour, force an
opaque white background and keep atomic blocks in one piece. Rules are scoped
to the capture container so the live document is never restyled.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

Rule = Tuple[str, str]

KATEX_RULES: List[Rule] = [
    (
        ".katex .frac-line",
        "border: none !important; height: 1.2px !important; "
        "background-color: currentColor !important; opacity: 1 !important;",
    ),
    (
        ".katex .sqrt-line",
        "height: 1.2px !important; background-color: currentColor !important; "
        "border: none !important; opacity: 1 !important;",
    ),
    (
        ".katex",
        "font-variant: normal !important; line-height: normal !important;",
    ),
]

BACKGROUND_RULE = "background-color: #ffffff !important;"


def _scoped(scope: Optional[str], selector: str) -> str:
    if not scope:
        return selector
    return ", ".join(f"{scope} {part.strip()}" for part in selector.split(","))


def build_capture_css(
    scope: Optional[str] = None,
    block_selector: Optional[str] = ".print-item",
    suppress_selectors: Sequence[str] = (),
) -> str:
    """
    Build the stylesheet injected while capturing.

    Args:
        scope: CSS selector of the capture container (e.g. "#pq-capture-1a2b")
        block_selector: Atomic block selector kept unbroken
        suppress_selectors: Elements hidden in the printed artifact

    Returns:
        CSS text
    """
    rules: List[Rule] = list(KATEX_RULES)
    if block_selector:
        rules.append((block_selector, "break-inside: avoid !important; page-break-inside: avoid !important;"))
    rules.extend(suppression_rules(suppress_selectors))

    lines = [f"{_scoped(scope, selector)} {{ {body} }}" for selector, body in rules]
    lines.append(f"{scope or 'body'} {{ {BACKGROUND_RULE} }}")
    return "\n".join(lines)


def suppression_rules(selectors: Iterable[str]) -> List[Rule]:
    return [(selector, "display: none !important;") for selector in selectors if selector]


def build_suppression_css(scope: Optional[str], selectors: Iterable[str]) -> str:
    """Only the rules hiding narration-only asides."""
    return "\n".join(f"{_scoped(scope, selector)} {{ {body} }}" for selector, body in suppression_rules(selectors))
