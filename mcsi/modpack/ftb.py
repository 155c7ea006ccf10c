"""
FTB modpack install pipeline.

FTB ships a native server installer per pack version. It is downloaded
into ``.mcsi``, run against the staging tree and removed afterwards.
"""

import logging
from typing import Optional, Sequence

from rich.progress import Progress

from ..catalog.ftb import FtbClient
from ..catalog.models import PackDetails, PackVersion
from ..context import ExecutionContext
from ..exceptions import InstallerProcessError, ReleaseNotFound, ValidationError
from ..utils import system
from ..utils.stager import ArtifactStager
from ..utils.system import SystemInfo
from .pipeline import InstallResult, finish_install

logger = logging.getLogger(__name__)


async def resolve_pack_id(
    client: FtbClient,
    pack_id: Optional[int] = None,
    search_terms: Optional[Sequence[str]] = None,
    mc_version: Optional[str] = None,
) -> int:
    """Return ``pack_id`` or the best search hit.

    With ``mc_version`` the first hit that has a version targeting that
    game version wins.
    """
    if pack_id is not None:
        return pack_id

    results = await client.search(search_terms or [])
    logger.debug(f"Search returned packs {results.packs}")

    if mc_version is None:
        if not results.packs:
            raise ReleaseNotFound(f"No FTB pack matches {' '.join(search_terms or [])!r}")
        return results.packs[0]

    for candidate in results.packs:
        details = await client.get_pack_details(candidate)
        if any(version.targets_game_version(mc_version) for version in details.versions):
            logger.info(f"Pack {details.name} ({candidate}) has a version for Minecraft {mc_version}")
            return candidate

    raise ReleaseNotFound(
        f"No FTB pack matching {' '.join(search_terms or [])!r} targets Minecraft {mc_version}"
    )


def select_version(details: PackDetails, version: str, mc_version: Optional[str] = None) -> PackVersion:
    """Pick a version of ``details``: ``latest`` is the most recently updated one."""
    versions = details.versions
    if mc_version is not None:
        versions = [v for v in versions if v.targets_game_version(mc_version)]

    if version.lower() == "latest":
        if not versions:
            raise ReleaseNotFound(f"FTB pack {details.id} has no versions")
        return max(versions, key=lambda v: v.updated)

    if not (version.isascii() and version.isdigit()):
        raise ValidationError(f"FTB version must be 'latest' or a numeric version id, got {version!r}")

    version_id = int(version)
    for candidate in versions:
        if candidate.id == version_id:
            return candidate
    raise ReleaseNotFound(f"FTB pack {details.id} has no version {version_id}")


async def install_ftb_pack(
    context: ExecutionContext,
    client: FtbClient,
    stager: ArtifactStager,
    version: str,
    pack_id: Optional[int] = None,
    search_terms: Optional[Sequence[str]] = None,
    mc_version: Optional[str] = None,
    progress: Optional[Progress] = None,
) -> InstallResult:
    """Install an FTB pack selected by id or search into the context's target."""
    context.setup()

    resolved_id = await resolve_pack_id(client, pack_id, search_terms, mc_version)
    details = await client.get_pack_details(resolved_id)
    pack_version = select_version(details, version, mc_version)
    logger.info(f"Installing {details.name} version {pack_version.name} ({pack_version.id})")

    installer_name = SystemInfo.executable_name(f"serverinstall_{resolved_id}_{pack_version.id}")
    installer = context.mcsi_dir / installer_name
    url = client.server_installer_url(resolved_id, pack_version.id, SystemInfo.ftb_target_os())

    staging_dir = context.fresh_dir(context.work_dir)
    try:
        await stager.download(url, installer)
        SystemInfo.make_executable(installer)

        logger.info("Running FTB server installer, this may take a few minutes...")
        returncode, output = await system.run_process(
            [installer, "--auto", "--path", staging_dir, "--nojava"],
            context.mcsi_dir,
        )
        if returncode != 0:
            tail = "\n".join(output)
            logger.error(f"FTB installer failed with return code {returncode}\n{tail}")
            raise InstallerProcessError(f"FTB installer failed with return code {returncode}")
    finally:
        if installer.is_file():
            installer.unlink()

    description = f"{details.name} {pack_version.name}"
    return finish_install(context, stager, staging_dir, description, progress)
