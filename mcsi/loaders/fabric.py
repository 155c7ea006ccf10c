"""
Fabric server installer.

Fabric publishes a ready-to-run server launcher jar per Minecraft,
loader and installer version, so no local installer process is needed.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx

from ..constants import DEFAULT_TIMEOUT_SECONDS, FABRIC_META_URL, SERVER_JAR_NAME
from ..exceptions import CatalogError
from ..utils.base_api import BaseAPIClient
from ..utils.stager import ArtifactStager
from ..version import McVersion
from .base import BaseLoaderInstaller

logger = logging.getLogger(__name__)


class FabricMetaClient(BaseAPIClient):
    """API client for meta.fabricmc.net."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(FABRIC_META_URL, timeout, {"Accept": "application/json"}, transport)

    async def latest_installer_version(self) -> str:
        """Get the newest Fabric installer version."""
        data = await self.get_json_async(self.build_url("installer"))
        try:
            return data[0]["version"]
        except (IndexError, KeyError, TypeError) as e:
            raise CatalogError("Fabric meta returned no installer versions", e) from e

    def server_jar_url(self, mc_version: str, loader_version: str, installer_version: str) -> str:
        return self.build_url(f"loader/{mc_version}/{loader_version}/{installer_version}/server/jar")


class FabricInstaller(BaseLoaderInstaller):
    """Installs the Fabric server launcher."""

    def __init__(
        self,
        mc_version: McVersion,
        loader_version: str,
        stager: ArtifactStager,
        java_executable: Optional[str] = None,
        meta_client: Optional[FabricMetaClient] = None,
    ) -> None:
        super().__init__(mc_version, loader_version, stager, java_executable)
        self.meta_client = meta_client

    @property
    def loader_type(self) -> str:
        return "fabric"

    async def install(self, target_dir: Path) -> Path:
        target_dir = Path(target_dir)
        owns_client = self.meta_client is None
        meta_client = self.meta_client or FabricMetaClient()

        try:
            installer_version = await meta_client.latest_installer_version()
            logger.info(f"Using Fabric installer {installer_version}")

            url = meta_client.server_jar_url(
                self.mc_version.as_str(), self.loader_version, installer_version
            )
            server_jar = await self.stager.download(url, target_dir / SERVER_JAR_NAME)
        finally:
            if owns_client:
                await meta_client.aclose()

        logger.info(f"Successfully installed fabric {self.loader_version} for Minecraft {self.mc_version}")
        return server_jar
