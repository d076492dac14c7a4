"""Carousel navigation state over rendered carousel items."""

import logging
from typing import List, Optional

from bs4 import Tag

logger = logging.getLogger(__name__)

SWIPE_THRESHOLD = 50
ACTIVE_CLASS = "active"


class CarouselController:
    """
    Track the active slide of one carousel.

    The controller only knows positions, not content. Once attached to a
    rendered container it keeps exactly one ``.carousel-item`` and one
    ``.indicator`` marked active.
    """

    def __init__(self, item_count: int = 0):
        self.count = max(int(item_count), 0)
        self.index = 0
        self.container: Optional[Tag] = None
        self._items: List[Tag] = []
        self._indicators: List[Tag] = []

    def attach(self, container: Tag) -> None:
        """Bind to the items of a freshly rendered container and reset to the first slide."""
        self.container = container
        self._items = container.select(".carousel-item")
        self._indicators = container.select(".carousel-indicators .indicator")
        self.reset(len(self._items))

    def reset(self, item_count: int) -> None:
        """Start over at index 0 for a replaced item list."""
        self.count = max(int(item_count), 0)
        self.index = 0
        self._sync()

    def next(self) -> int:
        if self.count:
            self.index = (self.index + 1) % self.count
            self._sync()
        return self.index

    def prev(self) -> int:
        if self.count:
            self.index = (self.index - 1 + self.count) % self.count
            self._sync()
        return self.index

    def jump_to(self, index: int) -> int:
        """Activate slide ``index``; out-of-range requests are ignored."""
        if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < self.count:
            self.index = index
            self._sync()
        else:
            logger.debug("Ignoring jump to slide %r of %d", index, self.count)
        return self.index

    def swipe(self, start_x: float, end_x: float) -> int:
        """A leftward swipe beyond the threshold goes forward, a rightward one goes back."""
        if start_x - end_x > SWIPE_THRESHOLD:
            return self.next()
        if end_x - start_x > SWIPE_THRESHOLD:
            return self.prev()
        return self.index

    def _sync(self) -> None:
        for elements in (self._items, self._indicators):
            for position, element in enumerate(elements):
                classes = [name for name in element.get("class", []) if name != ACTIVE_CLASS]
                if position == self.index:
                    classes.append(ACTIVE_CLASS)
                element["class"] = classes
