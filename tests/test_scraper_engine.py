"""End-to-end tests for the listing scraper over a mocked HTTP transport."""

import json
from pathlib import Path
from typing import Dict, List

import httpx
import pytest

from core.scraper_engine import ListingScraper
from core.types import ScraperSettings
from network.document_fetcher import DocumentFetcher
from scripts import scrape_listing
from utils.error_handling import NetworkError, ParsingError, RetryManager

PROJECT_ROOT = Path(__file__).resolve().parent.parent
BASE_URL = "https://shop.example.com/developer/smartphones"

PAGINATION = """
<div id="pages">
  <a href="?page=1">1</a>
  <a href="?page=2">2</a>
  <a href="?page=1">first</a>
</div>
"""


def _product_html(title: str, capacity: str, price: str, colours: List[str],
                  availability: str = "Availability: In Stock",
                  delivery: str = "Delivery by Tuesday 5th Jul 2022") -> str:
    swatches = "".join(f'<span data-colour="{colour}"></span>' for colour in colours)
    return f"""
    <div class="product">
      <h3>{title}</h3>
      <span class="capacity">{capacity}</span>
      <img src="../images/{title.lower().replace(' ', '-')}.png">
      <div class="price">{price}</div>
      <div class="colours">{swatches}</div>
      <div class="availability">{availability}</div>
      <div class="delivery">{delivery}</div>
    </div>
    """


PAGES: Dict[str, str] = {
    "1": _product_html("iPhone 12 Pro Max", "128GB", "£799.99", ["Red", "Blue"])
    + _product_html("iPhone 12 Pro Max", "128GB", "£799.99", ["Red"]),
    "2": _product_html(
        "Samsung Galaxy S20",
        "64GB",
        "£599.99",
        ["Black"],
        availability="Availability: Out of Stock",
    )
    + '<div class="product"><img src="../images/broken.png"></div>',
}


def _settings(**overrides) -> ScraperSettings:
    values = {
        "app.baseurl": BASE_URL,
        "selector.pages": "#pages a",
        "selector.product": "#products .product",
        "selector.product.content": "h3, span.capacity, div.price, div.availability, div.delivery",
        "selector.product.extra": "image=img[src]|color=div.colours > span[data-colour]",
        "training.extraction": str(PROJECT_ROOT / "training" / "extraction"),
        "training.validation": str(PROJECT_ROOT / "training" / "validation" / "availability.json"),
    }
    values.update(overrides)
    return ScraperSettings.model_validate(values)


def _page(body: str, pagination: str = PAGINATION) -> str:
    return f'<html><body><div id="products">{body}</div>{pagination}</body></html>'


class _Site:
    """Serves the listing pages and records requested URLs."""

    def __init__(self, pagination: str = PAGINATION, failures: int = 0) -> None:
        self.pagination = pagination
        self.failures = failures
        self.requests: List[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if self.failures:
            self.failures -= 1
            return httpx.Response(503)
        page = request.url.params.get("page")
        if page is None:
            return httpx.Response(200, html=_page(PAGES["1"], self.pagination))
        if page not in PAGES:
            return httpx.Response(404)
        return httpx.Response(200, html=_page(PAGES[page], self.pagination))


def _fetcher(site: _Site, max_retries: int = 0) -> DocumentFetcher:
    return DocumentFetcher(
        client=httpx.Client(transport=httpx.MockTransport(site)),
        retry_manager=RetryManager(max_retries=max_retries, sleep=lambda _delay: None),
    )


def test_run_scrapes_all_pages() -> None:
    site = _Site()

    with ListingScraper.from_settings(_settings(), fetcher=_fetcher(site), show_progress=False) as scraper:
        products = scraper.run()

    assert site.requests == [BASE_URL, f"{BASE_URL}?page=1", f"{BASE_URL}?page=2"]
    assert [(p.title, p.color) for p in products] == [
        ("iPhone 12 Pro Max 128GB", "red"),
        ("iPhone 12 Pro Max 128GB", "blue"),
        ("Samsung Galaxy S20 64GB", "black"),
    ]

    iphone = products[0]
    assert iphone.price == 799.99
    assert iphone.imageUrl == "https://shop.example.com/developer/images/iphone-12-pro-max.png"
    assert iphone.capacityMB == 128000
    assert iphone.availabilityText == "In Stock"
    assert iphone.isAvailable is True
    assert iphone.shippingText == "Delivery by Tuesday 5th Jul 2022"
    assert iphone.shippingDate == "2022-07-05"

    samsung = products[2]
    assert samsung.availabilityText == "Out of Stock"
    assert samsung.isAvailable is False

    report = scraper.error_reporter.generate_report()
    assert report["error_types"] == {"MissingFieldError": 1}


def test_run_without_pagination_scrapes_index() -> None:
    site = _Site(pagination="")

    with ListingScraper.from_settings(_settings(), fetcher=_fetcher(site), show_progress=False) as scraper:
        products = scraper.run()

    assert site.requests == [BASE_URL]
    assert [p.color for p in products] == ["red", "blue"]


def test_fetch_retries_retryable_status() -> None:
    site = _Site(failures=2)
    fetcher = _fetcher(site, max_retries=2)

    document = fetcher.fetch(BASE_URL)

    assert len(site.requests) == 3
    assert len(document.select("#products .product")) == 2
    assert fetcher.retry_manager.get_failure_stats() == {BASE_URL: 2}


def test_fetch_gives_up() -> None:
    site = _Site(failures=5)

    with pytest.raises(NetworkError, match="503"):
        _fetcher(site, max_retries=1).fetch(BASE_URL)
    assert len(site.requests) == 2


def test_fetch_client_error_is_not_retried() -> None:
    site = _Site()

    with pytest.raises(NetworkError, match="404"):
        _fetcher(site, max_retries=3).fetch(f"{BASE_URL}?page=9")
    assert len(site.requests) == 1


def test_transport_error_becomes_network_error() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = DocumentFetcher(
        client=httpx.Client(transport=httpx.MockTransport(_refuse)),
        retry_manager=RetryManager(max_retries=0),
    )

    with pytest.raises(NetworkError, match="connection refused"):
        fetcher.fetch(BASE_URL)


def test_cli_writes_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    settings = _settings()
    config = {
        alias: getattr(settings, name)
        for name, alias in (
            (name, field.alias) for name, field in ScraperSettings.model_fields.items()
        )
    }
    config["log.file"] = str(tmp_path / "logs" / "scrape.log")
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps(config), encoding="utf-8")
    output = tmp_path / "products.json"

    site = _Site()
    monkeypatch.setattr(
        "core.scraper_engine.DocumentFetcher",
        lambda **_kwargs: _fetcher(site),
    )

    exit_code = scrape_listing.main(
        ["--config", str(config_path), "--output", str(output), "--no-progress"]
    )

    assert exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert [row["color"] for row in data] == ["red", "blue", "black"]
    assert data[0]["shippingDate"] == "2022-07-05"


def test_cli_reports_configuration_error(tmp_path: Path) -> None:
    assert scrape_listing.main(["--config", str(tmp_path / "missing.json")]) == 1


def test_invalid_selector_aborts_run() -> None:
    site = _Site()
    settings = _settings(**{"selector.product": "#products .product["})

    with ListingScraper.from_settings(settings, fetcher=_fetcher(site), show_progress=False) as scraper:
        with pytest.raises(ParsingError, match="Invalid CSS selector"):
            scraper.run()
