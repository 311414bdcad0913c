"""
Catalog Sources

Collaborators that supply the raw innovation catalog at startup:
- BundledCatalogSource: the catalog shipped as package data
- JsonFileCatalogSource: a JSON array on disk
- RemoteCatalogSource: a paginated read-only HTTP query surface

Sources only fetch and decode JSON; record validation is the
CatalogStore's job.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Protocol

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from seedi.config import get_settings
from seedi.core.exceptions import CatalogSourceError, ConfigurationError

logger = logging.getLogger(__name__)

BUNDLED_RESOURCE = "data/innovations.json"


class CatalogSource(Protocol):
    """Anything that can produce the raw innovation records."""

    name: str

    def fetch(self) -> list[dict[str, Any]]: ...


def parse_record_array(raw: str, source: str) -> list[dict[str, Any]]:
    """Decode a JSON array of objects, rejecting anything else."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogSourceError(f"Catalog is not valid JSON: {e}", source=source) from e

    if not isinstance(payload, list):
        raise CatalogSourceError(
            f"Catalog must be a JSON array, got {type(payload).__name__}", source=source
        )
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise CatalogSourceError(
                f"Catalog entry {index} is not an object", source=source
            )
    return payload


class BundledCatalogSource:
    """The fixed catalog bundled with the package."""

    name = "bundled"

    def fetch(self) -> list[dict[str, Any]]:
        try:
            raw = resources.files("seedi.catalog").joinpath(BUNDLED_RESOURCE).read_text("utf-8")
        except (FileNotFoundError, OSError) as e:
            raise CatalogSourceError(f"Bundled catalog missing: {e}", source=self.name) from e
        return parse_record_array(raw, self.name)


class JsonFileCatalogSource:
    """Catalog stored as a JSON array file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self.name = f"file:{self._path}"

    @property
    def path(self) -> Path:
        return self._path

    def fetch(self) -> list[dict[str, Any]]:
        if not self._path.is_file():
            raise CatalogSourceError(f"Catalog file not found: {self._path}", source=self.name)
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogSourceError(f"Cannot read catalog file: {e}", source=self.name) from e
        return parse_record_array(raw, self.name)


class RetryableHTTPError(Exception):
    """Transient HTTP failure (429 or 5xx) that should be retried."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class RemoteCatalogSource:
    """
    Read-only catalog served over HTTP.

    Pages through ``GET {base_url}/api/innovations?page=N&limit=M``; each
    response has the shape ``{data: [...], pagination: {page, limit,
    total, totalPages}}``. Fetching stops after ``totalPages``.

    Usage:
        with RemoteCatalogSource("https://kb.example.org") as source:
            records = source.fetch()
    """

    RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        base_url: str,
        page_size: int | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_min_wait: float = 0.5,
        client: httpx.Client | None = None,
    ) -> None:
        settings = get_settings().catalog
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size or settings.page_size
        self._max_retries = max_retries or settings.max_retries
        self._retry_min_wait = retry_min_wait
        self._client = client or httpx.Client(timeout=timeout or settings.timeout_seconds)
        self._owns_client = client is None
        self.name = f"remote:{self._base_url}"

    def __enter__(self) -> "RemoteCatalogSource":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        page = 1
        while True:
            payload = self._get_page(page)
            data = payload.get("data")
            pagination = payload.get("pagination")
            if not isinstance(data, list) or not isinstance(pagination, dict):
                raise CatalogSourceError(
                    f"Malformed page {page}: expected 'data' list and 'pagination' object",
                    source=self.name,
                )
            records.extend(data)

            total_pages = int(pagination.get("totalPages", 0))
            logger.debug("Fetched catalog page %d/%d (%d records)", page, total_pages, len(data))
            if page >= total_pages or not data:
                break
            page += 1

        for index, item in enumerate(records):
            if not isinstance(item, dict):
                raise CatalogSourceError(f"Catalog entry {index} is not an object", source=self.name)
        return records

    def _get_page(self, page: int) -> dict[str, Any]:
        url = f"{self._base_url}/api/innovations"
        params = {"page": page, "limit": self._page_size}

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._max_retries),
                wait=wait_exponential_jitter(initial=self._retry_min_wait, max=10, jitter=0.5),
                retry=retry_if_exception_type((RetryableHTTPError, httpx.TransportError)),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    response = self._client.get(url, params=params)
                    if response.status_code in self.RETRYABLE_STATUS:
                        raise RetryableHTTPError(response.status_code, url)
                    if response.status_code >= 400:
                        raise CatalogSourceError(
                            f"Catalog request failed for page {page}",
                            source=self.name,
                            status_code=response.status_code,
                        )
                    return response.json()
        except RetryableHTTPError as e:
            raise CatalogSourceError(
                f"Catalog unavailable after {self._max_retries} attempts",
                source=self.name,
                status_code=e.status_code,
            ) from e
        except httpx.TransportError as e:
            raise CatalogSourceError(f"Catalog transport error: {e}", source=self.name) from e
        except ValueError as e:
            raise CatalogSourceError(f"Catalog page {page} is not JSON: {e}", source=self.name) from e

        raise RuntimeError("Retry exhausted without result")


def source_from_settings() -> CatalogSource:
    """Build the catalog source selected by configuration."""
    settings = get_settings().catalog
    if settings.source == "file":
        if settings.path is None:
            raise ConfigurationError("SEEDI_CATALOG_PATH is required for file catalogs")
        return JsonFileCatalogSource(settings.path)
    if settings.source == "remote":
        if not settings.url:
            raise ConfigurationError("SEEDI_CATALOG_URL is required for remote catalogs")
        return RemoteCatalogSource(settings.url)
    return BundledCatalogSource()
