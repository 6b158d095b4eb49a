"""
Content Resolver
================

Resolves document locators to raw text. Locators are classified by string
pattern before any I/O happens: local paths, http(s) URLs and object storage
URIs (s3://, gs://). Object storage objects are fetched through their public
HTTPS endpoints.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse
import asyncio

import aiohttp

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.errors import AccessDenied, NetworkError, NotFound

logger = get_logger(__name__)


class LocatorKind(str, Enum):
    """Where a locator points."""

    LOCAL = "local"
    NETWORK = "network"
    OBJECT_STORAGE = "object_storage"


_NETWORK_SCHEMES = {"http", "https"}
_OBJECT_STORAGE_SCHEMES = {"s3", "gs"}


def classify_locator(locator: str) -> LocatorKind:
    """Classify a locator without touching the filesystem or network."""
    scheme = locator.split("://", 1)[0].lower() if "://" in locator else ""
    if scheme in _NETWORK_SCHEMES:
        return LocatorKind.NETWORK
    if scheme in _OBJECT_STORAGE_SCHEMES:
        return LocatorKind.OBJECT_STORAGE
    return LocatorKind.LOCAL


class ContentResolver:
    """Fetches document text for local, network and object storage locators."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="content_resolver")

    async def resolve(self, locator: str) -> str:
        """
        Resolve a locator to text.

        Args:
            locator: Local path, file:// URI, http(s) URL or s3:// / gs:// URI

        Returns:
            Document text

        Raises:
            NotFound: If nothing exists at the locator
            AccessDenied: If the content exists but may not be read
            NetworkError: If remote content cannot be fetched
        """
        kind = classify_locator(locator)
        self.logger.info("Resolving content", locator=locator, kind=kind.value)

        if kind is LocatorKind.LOCAL:
            return await self._read_local(locator)
        if kind is LocatorKind.OBJECT_STORAGE:
            return await self._fetch(locator, self.object_storage_url(locator))
        return await self._fetch(locator, locator)

    def object_storage_url(self, locator: str) -> str:
        """Translate an object storage URI to its HTTPS endpoint."""
        parsed = urlparse(locator)
        bucket = parsed.netloc
        key = parsed.path.lstrip("/")
        if not bucket or not key:
            raise NotFound(locator, f"Invalid object storage URI: {locator}")

        if parsed.scheme.lower() == "s3":
            template = self.settings.s3_endpoint_template
        else:
            template = self.settings.gcs_endpoint_template
        return template.format(bucket=bucket, key=key)

    async def _read_local(self, locator: str) -> str:
        if locator.lower().startswith("file://"):
            path = Path(unquote(urlparse(locator).path))
        else:
            path = Path(locator).expanduser()
        path = path.resolve()

        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFound(locator, f"File not found: {path}") from e
        except PermissionError as e:
            raise AccessDenied(locator, f"Permission denied: {path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise NotFound(locator, f"Cannot read {path}: {e}") from e

    async def _fetch(self, locator: str, url: str) -> str:
        timeout = aiohttp.ClientTimeout(total=self.settings.fetch_timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status in (404, 410):
                        raise NotFound(locator, f"Not found: {url} (HTTP {response.status})")
                    if response.status in (401, 403):
                        raise AccessDenied(locator, f"Access denied: {url} (HTTP {response.status})")
                    if response.status >= 400:
                        raise NetworkError(locator, f"Fetch failed: {url} (HTTP {response.status})")
                    text = await response.text()
        except UnicodeDecodeError as e:
            self.logger.error("Content decode failed", url=url, encoding=e.encoding)
            raise NetworkError(locator, f"Cannot decode {url}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("Content fetch failed", url=url, error=str(e))
            raise NetworkError(locator, f"Fetch failed: {url}: {str(e) or type(e).__name__}") from e

        self.logger.info("Content fetched", url=url, length=len(text))
        return text
