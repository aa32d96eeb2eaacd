"""Normalisation helpers turning raw listing text into typed product values.

Every function here is total over string input: malformed text yields a
neutral default (``0`` or ``""``) instead of raising, since the scraped markup
is not under our control.
"""

import logging
import math
import re
from datetime import datetime
from typing import Optional, Union
from urllib.parse import urljoin, urlsplit

import dateparser

from utils.byte_converter import ByteConverter
from utils.keyphrases import KeyphraseExtractor, tokenize_words

logger = logging.getLogger(__name__)

_STORAGE_TEXT_RE = re.compile(r"^(\d+)([MGKT]?B)$", re.IGNORECASE)
_STORAGE_VALUE_RE = re.compile(r"(\d+\s?[GMKB])", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s")
_PRICE_CHARS_RE = re.compile(r"[^\d.]")
_LEADING_NUMBER_RE = re.compile(r"\d*(?:\.\d*)?")
_LABEL_PREFIX_RE = re.compile(r".*:\s*(.*)", re.IGNORECASE)
_DURATION_RE = re.compile(
    r"^\d+\s*(?:sec|second|min|minute|hr|hour|day|week|month|year)s?$", re.IGNORECASE
)

DATE_PARSER_SETTINGS = {"PREFER_DATES_FROM": "future"}

_byte_converter = ByteConverter()
_keyphrase_extractor = KeyphraseExtractor()


def normalize_storage_text(text: str) -> str:
    """Separate a storage size from its unit: ``"10GB"`` -> ``"10 GB"``."""
    return _STORAGE_TEXT_RE.sub(r"\1 \2", text)


def format_storage(storage: str, unit: str = "") -> Union[str, float]:
    """Format storage for output.

    Without ``unit`` the text is compacted for display (``"128 GB"`` ->
    ``"128GB"``). With a unit (B, KB, MB, GB) the first ``<number><unit>``
    token is converted using decimal multipliers and a float is returned.
    """
    if not unit:
        return _WHITESPACE_RE.sub("", storage)

    match = _STORAGE_VALUE_RE.search(storage)
    if not match:
        return 0.0

    value = match.group(1).lower()

    unit = unit.upper()
    if unit == "GB":
        return _byte_converter.get_gbytes(value)
    if unit == "MB":
        return _byte_converter.get_mbytes(value)
    if unit == "KB":
        return _byte_converter.get_kbytes(value)
    return _byte_converter.get_bytes(value)


def format_price(price: str) -> float:
    """Strip everything but digits and the decimal point: ``"$10.99"`` -> 10.99."""
    cleaned = _PRICE_CHARS_RE.sub("", price)
    number = _LEADING_NUMBER_RE.match(cleaned).group(0)
    if not number or number == ".":
        return 0.0
    value = float(number)
    return value if math.isfinite(value) else 0.0


def format_image_url(url: str, base_url: str) -> str:
    """Resolve a relative image url against ``base_url`` treated as a directory."""
    if not urlsplit(base_url).scheme:
        base_url = "https:" + base_url if base_url.startswith("//") else "https://" + base_url

    resolved = urljoin(base_url.rstrip("/") + "/", url)
    if resolved.startswith("//"):
        resolved = "https:" + resolved
    return resolved


def format_color(color: str) -> str:
    return color.lower()


def format_availability(availability: str) -> str:
    """Drop a leading label: ``"Availability: In Stock"`` -> ``"In Stock"``."""
    return _LABEL_PREFIX_RE.sub(r"\1", availability).strip()


def format_shipping_text(text: Optional[str]) -> str:
    return text if text is not None else ""


def _parse_date(phrase: str) -> Optional[datetime]:
    phrase = phrase.strip()
    # bare numbers and order cut-offs ("6 hours") are not delivery dates
    if phrase.isdigit() or _DURATION_RE.match(phrase):
        return None
    return dateparser.parse(phrase, languages=["en"], settings=DATE_PARSER_SETTINGS)


def format_delivery_date(delivery: Optional[str]) -> str:
    """Find the first date in delivery text, formatted ``YYYY-MM-DD``.

    Ranked keyphrases are tried first, then single words left to right.
    """
    if not delivery:
        return ""

    for phrase in _keyphrase_extractor.extract(delivery):
        date = _parse_date(phrase)
        if date is not None:
            return date.strftime("%Y-%m-%d")

    for word in tokenize_words(delivery):
        date = _parse_date(word)
        if date is not None:
            return date.strftime("%Y-%m-%d")

    logger.debug("No delivery date found in %r", delivery)
    return ""
