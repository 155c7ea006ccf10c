"""
FTB (modpacks.ch) catalog client.
"""

import logging
from typing import Optional, Sequence
from urllib.parse import quote_plus

import httpx

from ..constants import DEFAULT_TIMEOUT_SECONDS, FTB_API_URL, FTB_SEARCH_LIMIT
from ..utils.base_api import BaseAPIClient
from .models import PackDetails, SearchResults

logger = logging.getLogger(__name__)


def build_search_query(terms: Sequence[str]) -> str:
    """URL-encode each search term and join them with ``+``."""
    return "+".join(quote_plus(term) for term in terms)


class FtbClient(BaseAPIClient):
    """API client for the public FTB modpack API."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(FTB_API_URL, timeout, {"Accept": "application/json"}, transport)

    def server_installer_url(self, pack_id: int, version_id: int, target_os: str) -> str:
        return self.build_url(f"{pack_id}/{version_id}/server/{target_os}")

    async def search(self, terms: Sequence[str]) -> SearchResults:
        """Search packs, best match first."""
        query = build_search_query(terms)
        logger.debug(f"Searching FTB packs for {query!r}")
        data = await self.get_json_async(self.build_url(f"search/{FTB_SEARCH_LIMIT}?term={query}"))
        return SearchResults.from_dict(data)

    async def get_pack_details(self, pack_id: int) -> PackDetails:
        data = await self.get_json_async(self.build_url(str(pack_id)))
        return PackDetails.from_dict(data)
