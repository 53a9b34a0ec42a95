"""Opening link targets in a viewing context."""

from __future__ import annotations

import logging
import webbrowser
from abc import ABC, abstractmethod
from typing import Literal

logger = logging.getLogger(__name__)

Target = Literal["_self", "_blank"]


class UrlOpener(ABC):
    """Opens a URL in the current (``_self``) or a new (``_blank``) context."""

    @abstractmethod
    def open(self, url: str, target: Target = "_self") -> None:
        ...


class BrowserOpener(UrlOpener):
    """Hands URLs to the system browser."""

    def open(self, url: str, target: Target = "_self") -> None:
        # webbrowser: new=0 reuses a window, new=2 asks for a tab
        opened = webbrowser.open(url, new=2 if target == "_blank" else 0)
        if not opened:
            logger.warning("No browser available to open %s", url)
        else:
            logger.debug("Opened %s (%s)", url, target)
