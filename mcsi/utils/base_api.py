"""
HTTP plumbing shared by the catalog clients and the downloader.

JSON endpoints map HTTP failures onto ``CatalogError`` (404 becomes
``CatalogNotFoundError``). Downloads are streamed to disk and retried on
transport failures only.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

import httpx

from ..constants import (
    DEFAULT_TIMEOUT_SECONDS, DOWNLOAD_CHUNK_SIZE, DOWNLOAD_MAX_RETRIES,
    DOWNLOAD_TIMEOUT_SECONDS,
)
from ..exceptions import CatalogError, CatalogNotFoundError, DownloadError

logger = logging.getLogger(__name__)


class ProgressCallback(Protocol):
    """Receives bytes written so far and the expected total (0 if unknown)."""

    def __call__(self, downloaded: int, total: int) -> None:
        ...


class BaseHTTPClient:
    """Owns one lazily created ``httpx.AsyncClient``."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            timeout: Per-request timeout in seconds
            headers: Sent with every request
            transport: Replaces the network, for tests
        """
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._transport = transport
        self._async_client: Optional[httpx.AsyncClient] = None

    @property
    def async_client(self) -> httpx.AsyncClient:
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._async_client

    async def get_json_async(self, url: str, **kwargs: Any) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Args:
            url: Absolute URL
            **kwargs: Forwarded to ``AsyncClient.get`` (``params`` and so on)

        Raises:
            CatalogNotFoundError: On a 404 answer
            CatalogError: On any other error status, transport failure or invalid JSON
        """
        try:
            response = await self.async_client.get(url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.debug(f"HTTP {status} for {url}")
            error_cls = CatalogNotFoundError if status == 404 else CatalogError
            raise error_cls(f"Request to {url} failed with status {status}", e, status_code=status) from e
        except httpx.RequestError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise CatalogError(f"Failed to fetch data from {url}", e) from e
        except ValueError as e:
            logger.error(f"Response from {url} is not JSON: {e}")
            raise CatalogError(f"Invalid JSON response from {url}", e) from e

    async def aclose(self) -> None:
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None

    async def __aenter__(self) -> 'BaseHTTPClient':
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()


class BaseAPIClient(BaseHTTPClient):
    """A JSON API rooted at ``base_url``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout, headers, transport)
        self.base_url = base_url.rstrip('/')

    def build_url(self, endpoint: str) -> str:
        """Join ``endpoint`` onto the base URL, tolerating a leading slash."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"


class BaseDownloadClient(BaseHTTPClient):
    """Streams files to disk, retrying transport failures."""

    def __init__(
        self,
        timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        max_retries: int = DOWNLOAD_MAX_RETRIES,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            timeout: Per-request timeout in seconds
            max_retries: Total attempts per file; at least one is always made
            chunk_size: Bytes read from the response per write
            transport: Replaces the network, for tests
        """
        super().__init__(timeout, transport=transport)
        self.max_retries = max(1, max_retries)
        self.chunk_size = chunk_size

    async def download_file(
        self,
        url: str,
        destination: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Save ``url`` to ``destination``.

        A file already at ``destination`` (or left by a failed attempt) is
        removed before every attempt. Transport errors are retried at once,
        HTTP error statuses are not.

        Raises:
            DownloadError: On an error status, a write failure, or when all attempts fail
        """
        destination = Path(destination)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            if destination.is_file():
                destination.unlink()
            try:
                await self._stream_to_file(url, destination, progress_callback)
                logger.debug(f"Downloaded {url} to {destination}")
                return destination
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.error(f"Download of {url} failed with status {status}")
                raise DownloadError(f"Failed to download {url}: HTTP {status}", e) from e
            except httpx.TransportError as e:
                last_error = e
                logger.warning(f"Download attempt {attempt}/{self.max_retries} for {url} failed: {e}")
            except OSError as e:
                logger.error(f"Cannot write {destination}: {e}")
                raise DownloadError(f"Failed to write file {destination}", e) from e

        if destination.is_file():
            destination.unlink()
        raise DownloadError(
            f"Failed to download {url} after {self.max_retries} attempts", last_error
        ) from last_error

    async def _stream_to_file(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        async with self.async_client.stream("GET", url) as response:
            response.raise_for_status()
            expected = int(response.headers.get("content-length", 0))
            written = 0

            with open(destination, "wb") as out:
                async for chunk in response.aiter_bytes(chunk_size=self.chunk_size):
                    out.write(chunk)
                    written += len(chunk)
                    if progress_callback is not None:
                        progress_callback(written, expected)
