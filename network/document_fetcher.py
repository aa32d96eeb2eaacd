"""
Synchronous HTTP retrieval of listing documents using httpx.
"""

import logging
from typing import Optional

import httpx

from parsers.document import SoupDocument
from utils.error_handling import NetworkError, RetryManager

RETRY_STATUSES = {429, 500, 502, 503, 504}

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


class DocumentFetcher:
    """Fetches pages and parses them into ``SoupDocument`` objects."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        client: Optional[httpx.Client] = None,
        retry_manager: Optional[RetryManager] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
        )
        self.retry_manager = retry_manager or RetryManager(
            max_retries=max_retries, base_delay=0.5, max_delay=10.0
        )

    def _get(self, url: str) -> httpx.Response:
        try:
            response = self.client.get(url)
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}", {"url": url}) from e

        if response.status_code in RETRY_STATUSES:
            raise NetworkError(
                f"Retryable status {response.status_code} for {url}",
                {"url": url, "status": response.status_code},
            )
        return response

    def fetch(self, url: str) -> SoupDocument:
        response = self.retry_manager.retry(self._get, url, key=url)
        if response.is_error:
            raise NetworkError(
                f"HTTP {response.status_code} for {url}",
                {"url": url, "status": response.status_code},
            )

        self.logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return SoupDocument(response.text, str(response.url))

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "DocumentFetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
