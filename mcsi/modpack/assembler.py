"""
Pack assembly.

Turns a resolved CurseForge release into a fully staged server tree:
archives are downloaded and extracted into scratch directories, the
client manifest identifies the Minecraft version and loader, content is
copied into the staging tree and the loader is installed on top.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..catalog.models import ClientManifest, ReleaseFile, ResolvedPair
from ..constants import CLIENT_MANIFEST_FILE_NAME, MODS_DIR_NAME, OVERRIDES_DIR_NAME
from ..context import ExecutionContext
from ..exceptions import CatalogError, LoaderParseError, NoClientManifest
from ..loaders.dispatch import install_loader
from ..utils.stager import ArtifactStager
from ..version import LoaderDescriptor, McVersion, parse_loader_id
from .resolver import ReleaseCatalog

logger = logging.getLogger(__name__)


@dataclass
class AssembledPack:
    """Result of a successful assembly."""

    staging_dir: Path
    mc_version: McVersion
    loader: LoaderDescriptor
    from_server_pack: bool
    mod_count: int = 0


class PackAssembler:
    """Stages a server install for a resolved release pair."""

    def __init__(
        self,
        context: ExecutionContext,
        catalog: ReleaseCatalog,
        stager: ArtifactStager,
        java_executable: Optional[str] = None,
    ) -> None:
        self.context = context
        self.catalog = catalog
        self.stager = stager
        self.java_executable = java_executable

    async def assemble(self, pair: ResolvedPair) -> AssembledPack:
        client = pair.client
        server = pair.server

        try:
            if client is not None:
                await self._fetch_archive(client, self.context.client_dir)
            if server is not None:
                await self._fetch_archive(server, self.context.server_dir)

            client_manifest = self.read_client_manifest()
            mc_version = McVersion.parse(client_manifest.minecraft_version)
            loader = self._primary_loader(client_manifest)

            staging_dir = self.context.fresh_dir(self.context.work_dir)
            mod_count = 0
            if server is not None:
                self.stage_server_pack(staging_dir)
            else:
                mod_count = await self.stage_client_pack(client_manifest, staging_dir)
        finally:
            self.context.cleanup_scratch()

        await install_loader(loader, mc_version, staging_dir, self.stager, self.java_executable)

        return AssembledPack(
            staging_dir=staging_dir,
            mc_version=mc_version,
            loader=loader,
            from_server_pack=server is not None,
            mod_count=mod_count,
        )

    async def _fetch_archive(self, release: ReleaseFile, extract_dir: Path) -> None:
        """Download ``release`` and extract it into a freshly emptied ``extract_dir``."""
        archive = await self.stager.download(release.url, self.context.mcsi_dir / release.file_name)
        try:
            self.context.fresh_dir(extract_dir)
            self.stager.extract_zip(archive, extract_dir)
        finally:
            if archive.is_file():
                archive.unlink()

    def read_client_manifest(self) -> ClientManifest:
        path = self.context.client_dir / CLIENT_MANIFEST_FILE_NAME
        if not path.is_file():
            raise NoClientManifest("The client pack has no manifest.json, cannot determine Minecraft version and loader")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise NoClientManifest(f"Cannot read client manifest {path}", e) from e

        try:
            return ClientManifest.from_dict(data)
        except CatalogError as e:
            raise NoClientManifest(f"Invalid client manifest: {e.message}", e) from e

    def _primary_loader(self, client_manifest: ClientManifest) -> LoaderDescriptor:
        primary = client_manifest.primary_loader
        if primary is None:
            raise LoaderParseError("The client manifest marks no mod loader as primary")
        return parse_loader_id(primary.id)

    def stage_server_pack(self, staging_dir: Path) -> None:
        """Copy the content root of the extracted server pack into staging."""
        content_root = self.stager.closest_common_parent(self.context.server_dir)
        logger.info(f"Staging server pack from {content_root.name}")
        self.stager.recursive_copy(content_root, staging_dir)

    async def stage_client_pack(self, client_manifest: ClientManifest, staging_dir: Path) -> int:
        """Stage overrides and download every required mod, one at a time.

        Returns the number of downloaded mods.
        """
        overrides = self.context.client_dir / OVERRIDES_DIR_NAME
        if overrides.is_dir():
            self.stager.recursive_copy(overrides, staging_dir)

        mods_dir = staging_dir / MODS_DIR_NAME
        mods_dir.mkdir(parents=True, exist_ok=True)

        count = 0
        required = client_manifest.required_mods
        logger.info(f"Downloading {len(required)} required mods...")
        for reference in required:
            project = await self.catalog.get_project_info(reference.project_id)
            if not project.is_mod:
                logger.debug(f"Skipping project {reference.project_id}: class {project.class_id} is not a mod")
                continue

            release = await self.catalog.get_file_info(reference.project_id, reference.file_id)
            await self.stager.download(release.url, mods_dir / release.file_name)
            count += 1

        return count
