"""
Listing scraper orchestration.

Fetches the listing index, walks every pagination page, extracts and
assembles products per page and deduplicates the merged result.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urlencode

from core.deduplicator import dedupe_products
from core.field_classifier import AvailabilityClassifier, FieldClassifier
from core.product_assembler import ProductAssembler
from core.training import load_extraction_training, load_validation_training
from core.types import Product, ScraperSettings
from network.document_fetcher import DocumentFetcher
from parsers.document import Document
from parsers.page_links import PageLinkExtractor
from parsers.product_extractor import ProductExtractor
from utils.error_handling import ErrorReporter, MissingFieldError
from utils.logger import create_progress_bar


class ListingScraper:
    """Runs the page loop and the extraction pipeline for one listing site."""

    def __init__(
        self,
        settings: ScraperSettings,
        field_classifier: FieldClassifier,
        availability_classifier: AvailabilityClassifier,
        fetcher: DocumentFetcher,
        error_reporter: Optional[ErrorReporter] = None,
        show_progress: bool = True,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.page_links = PageLinkExtractor(settings.pages_selector)
        self.extractor = ProductExtractor(
            field_classifier,
            settings.product_selector,
            settings.content_selector,
            settings.extra_rules,
        )
        self.assembler = ProductAssembler(availability_classifier, settings.base_url)
        self.error_reporter = error_reporter or ErrorReporter()
        self.show_progress = show_progress
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls, settings: ScraperSettings, fetcher: Optional[DocumentFetcher] = None, **kwargs
    ) -> "ListingScraper":
        """Train both classifiers from the configured training data."""
        field_classifier = FieldClassifier(
            load_extraction_training(settings.extraction_training_dir)
        )
        availability_classifier = AvailabilityClassifier(
            load_validation_training(settings.validation_training_file)
        )
        fetcher = fetcher or DocumentFetcher(
            timeout=settings.http_timeout, max_retries=settings.http_max_retries
        )
        return cls(settings, field_classifier, availability_classifier, fetcher, **kwargs)

    def page_url(self, page_id: str) -> str:
        return f"{self.settings.base_url}?{urlencode({'page': page_id})}"

    def scrape_document(self, document: Document) -> List[Product]:
        """Products of one listing page; incomplete product nodes are skipped."""
        products: List[Product] = []
        for index, fields in enumerate(self.extractor.extract_all(document)):
            try:
                products.extend(self.assembler.assemble(fields))
            except MissingFieldError as e:
                self.logger.warning("Skipping product #%d: %s", index, e)
                self.error_reporter.report_error(
                    e, {"product_index": index, "url": getattr(document, "url", None)}
                )
        return products

    def run(self) -> List[Product]:
        index = self.fetcher.fetch(self.settings.base_url)

        page_ids = list(dict.fromkeys(self.page_links.extract(index)))
        self.logger.info("Found %d listing pages", len(page_ids))

        products: List[Product] = []
        if not page_ids:
            products.extend(self.scrape_document(index))
        else:
            for page_id in create_progress_bar(
                page_ids, desc="Pages", unit="page", disable=not self.show_progress
            ):
                document = self.fetcher.fetch(self.page_url(page_id))
                page_products = self.scrape_document(document)
                self.logger.info("Page %s: %d products", page_id, len(page_products))
                products.extend(page_products)

        unique = dedupe_products(products)
        self.logger.info(
            "Scraped %d products (%d after de-duplication)", len(products), len(unique)
        )
        return unique

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self) -> "ListingScraper":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
