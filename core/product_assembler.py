"""Turns raw per-product field maps into normalised Product records."""

from __future__ import annotations

import logging
from typing import List, Optional

from core.field_classifier import AvailabilityClassifier
from core.types import FieldMap, Product
from utils.error_handling import MissingFieldError
from utils.normalizers import (
    format_availability,
    format_color,
    format_delivery_date,
    format_image_url,
    format_price,
    format_shipping_text,
    format_storage,
)

REQUIRED_LABELS = ("title", "price")

logger = logging.getLogger(__name__)


class ProductAssembler:
    """Normalises a FieldMap and expands it into one Product per colour."""

    def __init__(self, availability: AvailabilityClassifier, base_url: str):
        self.availability = availability
        self.base_url = base_url

    @staticmethod
    def _text(fields: FieldMap, label: str) -> Optional[str]:
        raw = fields.get(label)
        if raw is None:
            return None
        return raw.first_text()

    def assemble(self, fields: FieldMap) -> List[Product]:
        """Build the products for one field map.

        Raises:
            MissingFieldError: if ``title`` or ``price`` is absent or empty.
        """
        for label in REQUIRED_LABELS:
            text = self._text(fields, label)
            if text is None or not text.strip():
                raise MissingFieldError(label, {"labels": sorted(fields)})

        storage = self._text(fields, "storage") or ""
        image = self._text(fields, "image")
        availability = self._text(fields, "availability") or ""
        delivery = self._text(fields, "delivery")

        title = f"{self._text(fields, 'title')} {format_storage(storage)}".strip()
        shared = dict(
            title=title,
            price=format_price(self._text(fields, "price")),
            imageUrl=format_image_url(image, self.base_url) if image else "",
            capacityMB=format_storage(storage, "MB"),
            availabilityText=format_availability(availability),
            isAvailable=self.availability.is_available(availability),
            shippingText=format_shipping_text(delivery),
            shippingDate=format_delivery_date(delivery),
        )

        colors = fields.get("color")
        if colors is None:
            logger.debug("No colour variants for '%s'; no products emitted", title)
            return []

        return [Product(**shared, color=format_color(variant)) for variant in colors.values()]
