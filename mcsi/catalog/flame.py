"""
CurseForge ("Flame") catalog client.
"""

import logging
from typing import Any, Optional

import httpx

from ..constants import DEFAULT_TIMEOUT_SECONDS, FLAME_API_URL, FLAME_PAGE_SIZE
from ..exceptions import CatalogError
from ..utils.base_api import BaseAPIClient
from .models import FilesPage, ProjectInfo, ReleaseFile

logger = logging.getLogger(__name__)


class FlameClient(BaseAPIClient):
    """API client for the CurseForge v1 API."""

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        page_size: int = FLAME_PAGE_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {
            "Accept": "application/json",
            "x-api-key": api_key,
        }
        super().__init__(FLAME_API_URL, timeout, headers, transport)
        self.page_size = page_size

    async def _get_data(self, endpoint: str, **kwargs: Any) -> Any:
        payload = await self.get_json_async(self.build_url(endpoint), **kwargs)
        if not isinstance(payload, dict) or "data" not in payload:
            raise CatalogError(f"Response from {endpoint} has no 'data' root")
        return payload

    async def get_project_info(self, project_id: int) -> ProjectInfo:
        """Get metadata of a project (modpack or mod)."""
        payload = await self._get_data(f"mods/{project_id}")
        return ProjectInfo.from_dict(payload["data"])

    async def get_file_info(self, project_id: int, file_id: int) -> ReleaseFile:
        """Get one file of a project."""
        payload = await self._get_data(f"mods/{project_id}/files/{file_id}")
        return ReleaseFile.from_dict(payload["data"])

    async def get_files(self, project_id: int, page: int) -> FilesPage:
        """Get one page of a project's files, newest first."""
        params = {"index": page * self.page_size, "pageSize": self.page_size}
        logger.debug(f"Fetching files of project {project_id}, page {page}")
        payload = await self._get_data(f"mods/{project_id}/files", params=params)
        return FilesPage.from_dict(payload)
