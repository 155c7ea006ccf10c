"""
Release resolution.

Turns a version selector into one concrete release of a CurseForge
project, and links a release with its client or server companion.
"""

import logging
from typing import Protocol

from ..catalog.models import FilesPage, ProjectInfo, ReleaseFile, ResolvedPair
from ..exceptions import CatalogNotFoundError, ReleaseNotFound
from ..version import ExplicitFileId, Latest, NameFragment, VersionSelector

logger = logging.getLogger(__name__)


class ReleaseCatalog(Protocol):
    """The catalog calls the resolver and assembler rely on."""

    async def get_project_info(self, project_id: int) -> ProjectInfo:
        ...

    async def get_file_info(self, project_id: int, file_id: int) -> ReleaseFile:
        ...

    async def get_files(self, project_id: int, page: int) -> FilesPage:
        ...


async def resolve(selector: VersionSelector, catalog: ReleaseCatalog, project_id: int) -> ReleaseFile:
    """Resolve ``selector`` to a release of ``project_id``.

    Raises:
        ReleaseNotFound: If a name search visits every page without a match
    """
    if isinstance(selector, Latest):
        logger.info("Version set to 'latest', determining file id...")
        info = await catalog.get_project_info(project_id)
        release = await catalog.get_file_info(project_id, info.main_file_id)

    elif isinstance(selector, ExplicitFileId):
        logger.info("Version recognized as a file id, validating id...")
        try:
            release = await catalog.get_file_info(project_id, selector.file_id)
        except CatalogNotFoundError:
            logger.info(f"No file with id {selector.file_id}, performing name search...")
            release = await search_by_name(selector.text, catalog, project_id)

    elif isinstance(selector, NameFragment):
        logger.info("Version is not a file id, performing name search...")
        release = await search_by_name(selector.text, catalog, project_id)

    else:
        raise TypeError(f"Unknown version selector: {selector!r}")

    logger.info(f"File id is: {release.id} ({release.display_name})")
    return release


async def search_by_name(fragment: str, catalog: ReleaseCatalog, project_id: int) -> ReleaseFile:
    """Return the first release, in catalog order, whose display name contains ``fragment``."""
    seen = 0
    page = 0

    while True:
        files_page = await catalog.get_files(project_id, page)

        for release in files_page.files:
            if fragment in release.display_name:
                return release

        pagination = files_page.pagination
        seen += pagination.result_count
        if pagination.result_count == 0 or seen >= pagination.total_count:
            break
        page += 1

    raise ReleaseNotFound(
        f"No release of project {project_id} has a name containing {fragment!r} "
        f"({seen} releases searched)"
    )


async def pair(release: ReleaseFile, catalog: ReleaseCatalog, project_id: int) -> ResolvedPair:
    """Fetch the companion of ``release``, making the server pack the primary file."""
    if release.is_server_pack:
        if release.parent_project_file_id is None:
            return ResolvedPair(primary=release)
        logger.info(f"Server pack {release.id} belongs to client file {release.parent_project_file_id}")
        parent = await catalog.get_file_info(project_id, release.parent_project_file_id)
        return ResolvedPair(primary=release, companion=parent)

    if release.server_pack_file_id is None:
        logger.info(f"File {release.id} has no server pack, installing from the client pack")
        return ResolvedPair(primary=release)

    logger.info(f"Using server pack {release.server_pack_file_id} of client file {release.id}")
    server_pack = await catalog.get_file_info(project_id, release.server_pack_file_id)
    return ResolvedPair(primary=server_pack, companion=release)
