"""Minimal document/node abstraction over parsed HTML."""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from utils.error_handling import ParsingError


@runtime_checkable
class Node(Protocol):
    def text(self) -> str:
        ...

    def attribute(self, name: str) -> Optional[str]:
        ...

    def children(self, selector: str) -> List["Node"]:
        ...


@runtime_checkable
class Document(Protocol):
    def select(self, selector: str) -> List[Node]:
        ...


def _select(tag: Tag, selector: str) -> List[Tag]:
    try:
        return tag.select(selector)
    except SelectorSyntaxError as e:
        raise ParsingError(f"Invalid CSS selector '{selector}': {e}", {"selector": selector}) from e


def scope_to_children(selector: str) -> str:
    """Anchor every comma separated part of ``selector`` at ``:scope >``."""
    parts: List[str] = []
    depth = 0
    current = ""
    for char in selector:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    parts.append(current)
    return ", ".join(f":scope > {part.strip()}" for part in parts if part.strip())


class SoupNode:
    """Node backed by a BeautifulSoup tag."""

    def __init__(self, tag: Tag):
        self._tag = tag

    def text(self) -> str:
        # whitespace collapsed
        return " ".join(self._tag.get_text().split())

    def attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def children(self, selector: str) -> List["SoupNode"]:
        """Nodes matching ``selector`` anchored at this node's direct children."""
        scoped = scope_to_children(selector)
        if not scoped:
            return []
        return [SoupNode(tag) for tag in _select(self._tag, scoped)]

    def __repr__(self) -> str:
        return f"SoupNode(<{self._tag.name}>)"


class SoupDocument:
    """Document parsed with BeautifulSoup's ``html.parser``."""

    def __init__(self, html: str, url: Optional[str] = None):
        self.url = url
        self._soup = BeautifulSoup(html, "html.parser")

    def select(self, selector: str) -> List[SoupNode]:
        return [SoupNode(tag) for tag in _select(self._soup, selector)]
