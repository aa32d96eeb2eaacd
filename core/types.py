"""
Base data types for the listing scraper.

Raw per-product field maps produced by extraction, the assembled ``Product``
record and the validated scraper settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict as PydanticConfigDict, Field, field_validator


# ============================================================================
# Raw extraction data
# ============================================================================

FieldText = Union[str, List[str]]
Distribution = Dict[str, float]


@dataclass
class RawField:
    """A text fragment (or ordered node values) assigned to a field label.

    ``prediction`` holds the classifier distribution and stays empty for
    values collected through explicit selector rules.
    """

    text: FieldText
    matched_label: str
    prediction: Distribution = field(default_factory=dict)

    def first_text(self) -> str:
        if isinstance(self.text, str):
            return self.text
        return self.text[0] if self.text else ""

    def values(self) -> List[str]:
        if isinstance(self.text, str):
            return [self.text]
        return list(self.text)


FieldMap = Dict[str, RawField]


# ============================================================================
# Assembled product
# ============================================================================


@dataclass(frozen=True)
class Product:
    """Normalised product record, one per colour variant."""

    title: str
    price: float
    imageUrl: str
    capacityMB: float
    availabilityText: str
    isAvailable: bool
    shippingText: str
    shippingDate: str
    color: str

    def to_dict(self, only: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """Ordered field mapping, optionally limited to ``only``."""
        names = [f.name for f in fields(self)]
        if only:
            names = [name for name in names if name in only]
        return {name: getattr(self, name) for name in names}

    def dedupe_key(self) -> tuple:
        return (self.title, self.price, self.color)


# ============================================================================
# Settings
# ============================================================================


class ScraperSettings(BaseModel):
    """Validated scraper settings, keyed by the flat dotted configuration keys."""

    model_config = PydanticConfigDict(populate_by_name=True, frozen=True)

    base_url: str = Field(alias="app.baseurl")
    pages_selector: str = Field(alias="selector.pages")
    product_selector: str = Field(alias="selector.product")
    content_selector: str = Field(alias="selector.product.content")
    extra_rules: str = Field(alias="selector.product.extra")
    extraction_training_dir: str = Field(
        default="training/extraction", alias="training.extraction"
    )
    validation_training_file: str = Field(
        default="training/validation/availability.json", alias="training.validation"
    )
    output_path: str = Field(default="output.json", alias="output.path")
    http_timeout: float = Field(default=30.0, alias="http.timeout", gt=0)
    http_max_retries: int = Field(default=3, alias="http.max_retries", ge=0)
    log_level: str = Field(default="INFO", alias="log.level")
    log_file: str = Field(default="data/logs/scrape.log", alias="log.file")

    @field_validator("base_url", "pages_selector", "product_selector", "content_selector")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()
