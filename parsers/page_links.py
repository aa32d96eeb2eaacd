"""Pagination link parsing for listing pages."""

from __future__ import annotations

import logging
from typing import List
from urllib.parse import parse_qs, urlsplit

from parsers.document import Document

logger = logging.getLogger(__name__)


class PageLinkExtractor:
    """Reads pagination links into page identifiers (the ``page`` query value)."""

    def __init__(self, selector: str, query_param: str = "page"):
        self.selector = selector
        self.query_param = query_param

    def extract(self, document: Document) -> List[str]:
        pages: List[str] = []
        for node in document.select(self.selector):
            href = node.attribute("href")
            if not href:
                continue

            values = parse_qs(urlsplit(href).query).get(self.query_param)
            if not values:
                logger.debug("Pagination link without '%s': %s", self.query_param, href)
                continue
            pages.append(values[0])
        return pages
