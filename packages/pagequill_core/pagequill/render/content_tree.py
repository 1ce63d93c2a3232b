"""

Content tree - a rendered HTML element inside a Playwright page.

A ContentTree wraps the root element of the content to paginate. Layout
mutation never happens on the live tree: ``detached_clone()`` deep-copies the
root into an off-screen container, yields a ContentTree for the copy and
removes the container again on every exit path.

"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Iterator, List, Optional, Sequence

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from ..engine.block_adjuster import AtomicBlock, BlockShift
from ..exceptions import CaptureFailure, CaptureTargetMissing

logger = logging.getLogger(__name__)

CONTAINER_PREFIX = "pq-capture-"

_CLONE_JS = """
([source, containerId, width]) => {
  const container = document.createElement('div');
  container.id = containerId;
  container.setAttribute('data-pagequill', 'capture');
  Object.assign(container.style, {
    position: 'absolute',
    top: '0',
    left: '0',
    width: width + 'px',
    background: '#ffffff',
    zIndex: '-9999',
    visibility: 'hidden',
  });
  let clone;
  if (source === document.body) {
    clone = document.createElement('div');
    for (const child of Array.from(source.children)) {
      if (child.getAttribute('data-pagequill') === 'capture') continue;
      clone.appendChild(child.cloneNode(true));
    }
  } else {
    clone = source.cloneNode(true);
  }
  Object.assign(clone.style, {
    width: width + 'px',
    minWidth: width + 'px',
    maxWidth: 'none',
    boxSizing: 'border-box',
    marginLeft: '0',
    marginRight: '0',
  });
  container.appendChild(clone);
  document.body.appendChild(container);
  return clone;
}
"""

_REMOVE_JS = """
(containerId) => {
  for (const id of [containerId, containerId + '-style']) {
    const node = document.getElementById(id);
    if (node) node.remove();
  }
}
"""

_ADD_STYLE_JS = """
([styleId, css]) => {
  const style = document.createElement('style');
  style.id = styleId;
  style.textContent = css;
  document.head.appendChild(style);
}
"""

_REMOVE_STYLE_JS = """
(styleId) => {
  const node = document.getElementById(styleId);
  if (node) node.remove();
}
"""

_MEASURE_JS = """
([root, selector]) => {
  const rootTop = root.getBoundingClientRect().top;
  const items = Array.from(root.querySelectorAll(selector));
  return items.map((el, index) => {
    const rect = el.getBoundingClientRect();
    let parent = null;
    for (let node = el.parentElement; node && node !== root; node = node.parentElement) {
      const found = items.indexOf(node);
      if (found !== -1) { parent = found; break; }
    }
    return {
      index,
      top: rect.top - rootTop,
      height: rect.height,
      marginTop: parseFloat(window.getComputedStyle(el).marginTop) || 0,
      parent,
    };
  });
}
"""

_APPLY_SHIFTS_JS = """
([root, selector, shifts]) => {
  const items = Array.from(root.querySelectorAll(selector));
  let applied = 0;
  for (const shift of shifts) {
    const el = items[shift.index];
    if (!el) continue;
    el.style.marginTop = shift.marginTop + 'px';
    applied += 1;
  }
  return applied;
}
"""

_TYPESET_JS = r"""
async (root) => {
  let engine = null;
  if (typeof window.renderMathInElement === 'function') {
    window.renderMathInElement(root, {
      delimiters: [
        { left: '$$', right: '$$', display: true },
        { left: '\\[', right: '\\]', display: true },
        { left: '\\(', right: '\\)', display: false },
      ],
      throwOnError: false,
      strict: false,
    });
    engine = 'katex';
  }
  if (window.MathJax && typeof window.MathJax.typesetPromise === 'function') {
    await window.MathJax.typesetPromise([root]);
    engine = engine || 'mathjax';
  }
  void root.offsetHeight;
  const rendered = root.querySelectorAll('.katex, mjx-container').length;
  const pending = /\$\$|\\\[|\\\(/.test(root.textContent || '');
  return { engine, rendered, pending };
}
"""

_FONTS_JS = """
() => (document.fonts ? document.fonts.ready.then(() => document.fonts.status) : 'loaded')
"""

_SHOW_CONTAINER_JS = """
(containerId) => {
  const container = document.getElementById(containerId);
  if (!container) return null;
  const original = container.style.cssText;
  container.style.visibility = 'visible';
  container.style.zIndex = '2147483647';
  return original;
}
"""

_RESTORE_CONTAINER_JS = """
([containerId, cssText]) => {
  const container = document.getElementById(containerId);
  if (container) container.style.cssText = cssText;
}
"""


@contextmanager
def browser_errors(action: str, label: str) -> Iterator[None]:
    """Report Playwright errors raised inside the block as CaptureFailure."""
    try:
        yield
    except PlaywrightError as exc:
        raise CaptureFailure(f"Could not {action} {label}", str(exc)) from exc


@dataclass(slots=True)
class TypesetResult:
    """Outcome of one typesetting pass."""
    engine: Optional[str] = None
    rendered: int = 0
    pending: bool = False

    @property
    def needs_retry(self) -> bool:
        return bool(self.engine) and self.rendered == 0 and self.pending


class ContentTree:
    """Root element of a renderable document inside a browser page."""

    def __init__(
        self,
        page: Page,
        root: ElementHandle,
        container_id: Optional[str] = None,
        label: str = "content",
    ):
        self.page = page
        self.root = root
        self.container_id = container_id
        self.label = label

    def __repr__(self) -> str:
        return f"ContentTree({self.label!r}, container={self.container_id!r})"

    @property
    def scope_selector(self) -> Optional[str]:
        return f"#{self.container_id}" if self.container_id else None

    @classmethod
    async def locate(cls, page: Page, selector: str, label: Optional[str] = None) -> "ContentTree":
        """
        Resolve ``selector`` to a content tree.

        Raises:
            CaptureTargetMissing: If no element matches
            CaptureFailure: If the selector cannot be evaluated
        """
        with browser_errors("query", repr(selector)):
            handle = await page.query_selector(selector)
        if handle is None:
            raise CaptureTargetMissing("Content element not found", selector)
        return cls(page, handle, label=label or selector)

    async def is_attached(self) -> bool:
        try:
            return bool(await self.root.evaluate("(el) => el.isConnected"))
        except PlaywrightError:
            return False

    async def css_width(self) -> float:
        return float(await self.root.evaluate("(el) => el.getBoundingClientRect().width"))

    async def inner_html(self) -> str:
        with browser_errors("snapshot", self.label):
            return await self.root.evaluate("(el) => el.innerHTML")

    async def outer_html(self) -> str:
        with browser_errors("snapshot", self.label):
            return await self.root.evaluate("(el) => el.outerHTML")

    @asynccontextmanager
    async def detached_clone(self, width_px: float, extra_css: Optional[str] = None) -> AsyncIterator["ContentTree"]:
        """

        Deep-copy the tree into a hidden off-screen container.

        The container gets a unique id, so parallel jobs on the same page do
        not interfere. It is removed from the DOM on every exit path.

        Args:
        width_px: Logical width of the container (authoring width)
        extra_css: Stylesheet scoped to the container, installed for the
        clone's lifetime. ``{scope}`` is replaced with the container selector.

        Yields:
        ContentTree of the clone

        """
        if not await self.is_attached():
            raise CaptureTargetMissing("Content element is not attached", self.label)

        container_id = f"{CONTAINER_PREFIX}{uuid.uuid4().hex[:12]}"
        try:
            handle = await self.page.evaluate_handle(_CLONE_JS, [self.root, container_id, width_px])
        except PlaywrightError as exc:
            await self._remove_container(container_id)
            raise CaptureFailure("Could not clone content tree", str(exc)) from exc

        clone_root = handle.as_element()
        if clone_root is None:
            await self._remove_container(container_id)
            raise CaptureFailure("Clone did not produce an element", self.label)

        clone = ContentTree(self.page, clone_root, container_id=container_id, label=f"{self.label} (clone)")
        logger.debug(f"Detached clone created in #{container_id} at {width_px}px")
        try:
            if extra_css:
                with browser_errors("style", clone.label):
                    await self.page.evaluate(
                        _ADD_STYLE_JS, [f"{container_id}-style", extra_css.replace("{scope}", f"#{container_id}")]
                    )
            yield clone
        finally:
            await self._remove_container(container_id)

    async def _remove_container(self, container_id: str) -> None:
        try:
            await self.page.evaluate(_REMOVE_JS, container_id)
            logger.debug(f"Detached container #{container_id} removed")
        except PlaywrightError as exc:
            # the page may already be closed when a job fails
            logger.warning(f"Could not remove capture container #{container_id}: {exc}")

    @asynccontextmanager
    async def scoped_styles(self, css: str) -> AsyncIterator[None]:
        """Install a stylesheet for the duration of the block."""
        style_id = f"{self.container_id or 'pq-live'}-capture-{uuid.uuid4().hex[:8]}"
        with browser_errors("style", self.label):
            await self.page.evaluate(_ADD_STYLE_JS, [style_id, css])
        try:
            yield
        finally:
            try:
                await self.page.evaluate(_REMOVE_STYLE_JS, style_id)
            except PlaywrightError as exc:
                logger.warning(f"Could not remove capture stylesheet {style_id}: {exc}")

    async def typeset(self) -> TypesetResult:
        """Trigger a synchronous typesetting pass over the tree."""
        with browser_errors("typeset", self.label):
            result = await self.root.evaluate(_TYPESET_JS)
        return TypesetResult(
            engine=result.get("engine"),
            rendered=int(result.get("rendered") or 0),
            pending=bool(result.get("pending")),
        )

    async def wait_for_fonts(self) -> str:
        """Resolve once the document's fonts report loaded."""
        with browser_errors("wait for fonts of", self.label):
            return await self.page.evaluate(_FONTS_JS)

    async def measure_blocks(self, selector: str) -> List[AtomicBlock]:
        """Read offsets of all atomic blocks, relative to the tree's root."""
        with browser_errors("measure blocks of", self.label):
            rows = await self.page.evaluate(_MEASURE_JS, [self.root, selector])
        return [
            AtomicBlock(
                index=row["index"],
                top=float(row["top"]),
                height=float(row["height"]),
                margin_top=float(row["marginTop"]),
                parent=row.get("parent"),
            )
            for row in rows
        ]

    async def apply_block_shifts(self, shifts: Sequence[BlockShift], selector: str = ".print-item") -> int:
        """Set the new inline top margins. Content is never touched."""
        payload = [{"index": s.index, "marginTop": s.margin_top} for s in shifts]
        with browser_errors("apply block margins to", self.label):
            return await self.page.evaluate(_APPLY_SHIFTS_JS, [self.root, selector, payload])

    async def units(self, selector: str) -> List["ContentTree"]:
        """Independent, page-sized units inside this tree."""
        with browser_errors("find units in", self.label):
            handles = await self.root.query_selector_all(selector)
        return [
            ContentTree(self.page, handle, container_id=self.container_id, label=f"{selector}[{i}]")
            for i, handle in enumerate(handles)
        ]

    async def screenshot(self) -> bytes:
        return await self.root.screenshot(type="png", animations="disabled")

    async def show_container(self) -> Optional[str]:
        if not self.container_id:
            return None
        return await self.page.evaluate(_SHOW_CONTAINER_JS, self.container_id)

    async def restore_container(self, css_text: str) -> None:
        if self.container_id:
            await self.page.evaluate(_RESTORE_CONTAINER_JS, [self.container_id, css_text])


async def acquire_capture_visibility(tree: ContentTree) -> Callable[[], Awaitable[None]]:
    """
    Make the tree's off-screen container capturable.

    Returns:
        Coroutine function restoring the container's original inline style
    """
    original = await tree.show_container()

    async def release() -> None:
        if original is None:
            return
        try:
            await tree.restore_container(original)
        except PlaywrightError as exc:
            logger.warning(f"Could not restore capture container of {tree.label}: {exc}")

    return release


@asynccontextmanager
async def capture_visibility(tree: ContentTree) -> AsyncIterator[ContentTree]:
    """Scoped form of :func:`acquire_capture_visibility`."""
    release = await acquire_capture_visibility(tree)
    try:
        yield tree
    finally:
        await release()
