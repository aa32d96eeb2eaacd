"""
Per-product field extraction.

Generic content fragments are labelled by the field classifier; fields that
live in attributes (image source, colour swatches) come from explicit
``label=selector[attribute]`` rules.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from core.field_classifier import FieldClassifier
from core.types import FieldMap, RawField
from parsers.document import Document, Node
from utils.normalizers import normalize_storage_text

RULE_SEPARATOR = "|"
_ATTRIBUTE_RE = re.compile(r".*\[(.*?)\]")


@dataclass(frozen=True)
class ExtraRule:
    """An explicit ``label=selector`` extraction rule."""

    label: str
    selector: str

    @property
    def attribute(self) -> Optional[str]:
        """Attribute named by the last bracket token, e.g. ``src`` in ``img[src]``."""
        match = _ATTRIBUTE_RE.match(self.selector)
        if not match:
            return None
        name = match.group(1).split("=", 1)[0].strip()
        return name or None

    def extract(self, node: Node) -> List[str]:
        attribute = self.attribute
        values: List[str] = []
        for child in node.children(self.selector):
            value = child.attribute(attribute) if attribute else child.text()
            if value is not None:
                values.append(value)
        return values


def parse_extra_rules(spec: str) -> List[ExtraRule]:
    """Parse ``"image=img[src]|color=span[data-colour]"`` into rules.

    Malformed entries are skipped with a warning.
    """
    logger = logging.getLogger(__name__)
    rules: List[ExtraRule] = []
    for entry in spec.split(RULE_SEPARATOR):
        if not entry.strip():
            continue
        label, sep, selector = entry.partition("=")
        if not sep or not label.strip() or not selector.strip():
            logger.warning("Skipping malformed extra selector rule: %r", entry)
            continue
        rules.append(ExtraRule(label.strip(), selector.strip()))
    return rules


class ProductExtractor:
    """Builds one FieldMap per product node."""

    def __init__(
        self,
        classifier: FieldClassifier,
        product_selector: str,
        content_selector: str,
        extra_rules: str = "",
    ):
        self.classifier = classifier
        self.product_selector = product_selector
        self.content_selector = content_selector
        self.rules = parse_extra_rules(extra_rules)
        self.logger = logging.getLogger(__name__)

    def classify_content(self, node: Node) -> FieldMap:
        fields: FieldMap = {}
        for child in node.children(self.content_selector):
            text = normalize_storage_text(child.text())
            if not text:
                continue

            result = self.classifier.classify(text)
            if result is None:
                continue

            if result.label in fields:
                # last fragment wins
                self.logger.debug(
                    "Fragment %r replaces %r for label '%s'",
                    text,
                    fields[result.label].text,
                    result.label,
                )
            fields[result.label] = RawField(text, result.label, result.distribution)
        return fields

    def extract_explicit(self, node: Node) -> FieldMap:
        return {
            rule.label: RawField(rule.extract(node), rule.label)
            for rule in self.rules
        }

    def extract(self, node: Node) -> FieldMap:
        """Classifier fields first, then explicit rule fields on top."""
        fields = self.classify_content(node)
        fields.update(self.extract_explicit(node))
        if not fields:
            self.logger.warning("No fields extracted from %r", node)
        return fields

    def extract_all(self, document: Document) -> List[FieldMap]:
        return [self.extract(node) for node in document.select(self.product_selector)]
