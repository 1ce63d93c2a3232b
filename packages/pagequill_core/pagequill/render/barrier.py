"""
Render-readiness barrier.

Nothing may be measured or captured before asynchronous typesetting and font
loading have settled. The barrier triggers typesetting eagerly, races the
document's font-readiness signal against a timeout and finally waits a short,
fixed settle delay to absorb post-font reflow.

A timeout is not fatal: a slightly imperfect capture is preferred over
blocking forever.
"""

import asyncio
import logging
from typing import Optional

from ..exceptions import TypesettingTimeout

logger = logging.getLogger(__name__)

DEFAULT_FONT_TIMEOUT_S = 5.0
DEFAULT_SETTLE_DELAY_S = 0.3


class RenderReadinessBarrier:
    """Synchronization point run before every capture."""

    def __init__(
        self,
        font_timeout: float = DEFAULT_FONT_TIMEOUT_S,
        settle_delay: float = DEFAULT_SETTLE_DELAY_S,
        retry_typesetting: bool = True,
    ):
        """
        Initialize barrier.

        Args:
            font_timeout: Seconds to wait for fonts before proceeding anyway
            settle_delay: Seconds to wait after fonts report loaded
            retry_typesetting: Re-run typesetting once when math delimiters
                remain but nothing was rendered
        """
        self.font_timeout = font_timeout
        self.settle_delay = settle_delay
        self.retry_typesetting = retry_typesetting
        self.last_timeout: Optional[TypesettingTimeout] = None

    async def ensure_ready(self, tree) -> bool:
        """
        Wait until ``tree`` is ready to be measured or captured.

        Args:
            tree: ContentTree (live tree, clone or unit)

        Returns:
            True when fonts settled in time, False when the timeout was hit
        """
        self.last_timeout = None

        result = await tree.typeset()
        if self.retry_typesetting and result.needs_retry:
            logger.warning(f"No rendered math found in {tree.label} after {result.engine} pass, retrying")
            result = await tree.typeset()
        logger.debug(f"Typesetting pass on {tree.label}: engine={result.engine}, rendered={result.rendered}")

        settled = True
        try:
            status = await asyncio.wait_for(tree.wait_for_fonts(), timeout=self.font_timeout)
            logger.debug(f"Fonts ready for {tree.label}: {status}")
        except asyncio.TimeoutError:
            settled = False
            self.last_timeout = TypesettingTimeout(self.font_timeout, tree.label)
            logger.warning(f"{self.last_timeout}; proceeding with best-effort rendering")

        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        return settled
