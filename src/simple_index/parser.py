"""Lenient anchor extraction from simple-repository HTML pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Anchor:
    """An ``<a>`` element found anywhere in a document."""

    attributes: Dict[str, Optional[str]] = field(default_factory=dict)
    text: Optional[str] = None

    def get(self, name: str) -> Optional[str]:
        return self.attributes.get(name)


class _AnchorCollector(HTMLParser):
    """Collects every anchor in document order, regardless of nesting depth."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.anchors: List[Anchor] = []
        self._current: Optional[Anchor] = None

    def handle_starttag(self, tag, attrs):
        if tag != "a":
            return
        # Anchors cannot nest; a new one implicitly closes the previous.
        self._finish()
        attributes: Dict[str, Optional[str]] = {}
        for name, value in attrs:
            attributes.setdefault(name, value)
        self._current = Anchor(attributes=attributes)

    def handle_startendtag(self, tag, attrs):
        if tag == "a":
            self._finish()

    def handle_endtag(self, tag):
        if tag == "a":
            self._finish()

    def handle_data(self, data):
        if self._current is None:
            return
        self._current.text = (self._current.text or "") + data

    def close(self):
        super().close()
        self._finish()

    def _finish(self) -> None:
        if self._current is not None:
            self.anchors.append(self._current)
            self._current = None


def find_anchors(document: str) -> List[Anchor]:
    """Return all anchors of an HTML document in document order.

    Malformed markup never raises; whatever anchors can be recovered are
    returned, and an empty or non-HTML document yields an empty list.
    """
    collector = _AnchorCollector()
    collector.feed(document)
    collector.close()
    logger.debug("Found %d anchors in %d bytes of HTML", len(collector.anchors), len(document))
    return collector.anchors
