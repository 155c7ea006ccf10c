"""
Artifact staging utilities.

Downloads files, extracts archives and copies directory trees while
reporting progress through an optional rich progress display.
"""

import logging
import os
import shutil
import zipfile
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Union

from rich.progress import Progress

from ..exceptions import StagingIOError
from .base_api import BaseDownloadClient

logger = logging.getLogger(__name__)


def iter_relative_files(root: Path) -> List[Path]:
    """Return every file below ``root`` relative to it, in directory-walk order."""
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        for filename in filenames:
            files.append((current / filename).relative_to(root))
    return files


def closest_common_parent(root: Union[str, Path]) -> Path:
    """Find the directory that holds the actual content of an extracted archive.

    Directories below ``root`` are bucketed by depth (``root`` itself is the
    only member at depth 0). The content root is the unique member of the
    deepest bucket that holds exactly one directory. Files are ignored, so a
    loose README next to a wrapper directory does not stop the unwrap.
    """
    root = Path(root)
    if not root.is_dir():
        raise StagingIOError(f"{root} is not a directory")

    buckets: Dict[int, List[Path]] = defaultdict(list)
    buckets[0].append(root)
    for dirpath, dirnames, _ in os.walk(root):
        depth = len(Path(dirpath).relative_to(root).parts) + 1
        for name in dirnames:
            buckets[depth].append(Path(dirpath) / name)

    deepest = max(depth for depth, members in buckets.items() if len(members) == 1)
    common = buckets[deepest][0]

    logger.debug(f"Content root of {root} is {common}")
    return common


class ArtifactStager:
    """Downloads, extracts and copies artifacts for an install."""

    def __init__(
        self,
        downloader: BaseDownloadClient,
        progress: Optional[Progress] = None,
    ) -> None:
        self.downloader = downloader
        self.progress = progress

    async def download(self, url: str, destination: Union[str, Path]) -> Path:
        """Download ``url`` to ``destination``, replacing any existing file."""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading {destination.name}...")

        if self.progress is None:
            return await self.downloader.download_file(url, destination)

        task_id = self.progress.add_task(f"Downloading {destination.name}", total=None)

        def on_progress(downloaded: int, total: int) -> None:
            self.progress.update(task_id, completed=downloaded, total=total or None)

        try:
            return await self.downloader.download_file(url, destination, on_progress)
        finally:
            self.progress.remove_task(task_id)

    def extract_zip(self, archive: Union[str, Path], dest_dir: Union[str, Path]) -> Path:
        """Extract ``archive`` into ``dest_dir``, which must already be prepared."""
        archive = Path(archive)
        dest_dir = Path(dest_dir)
        logger.info(f"Extracting {archive.name}...")
        try:
            with zipfile.ZipFile(archive, "r") as zf:
                zf.extractall(dest_dir)
        except (zipfile.BadZipFile, OSError) as e:
            raise StagingIOError(f"Failed to extract {archive}", e) from e
        return dest_dir

    def recursive_copy(self, src_dir: Union[str, Path], dest_dir: Union[str, Path]) -> int:
        """Copy every file below ``src_dir`` to the same relative path under ``dest_dir``.

        Existing files are overwritten, other files in ``dest_dir`` are left alone.
        Returns the number of copied files.
        """
        src_dir = Path(src_dir)
        dest_dir = Path(dest_dir)
        logger.info(f"Copying files from {src_dir} to {dest_dir}...")

        task_id = None
        if self.progress is not None:
            task_id = self.progress.add_task("Copying files", total=None)

        count = 0
        try:
            for relative in iter_relative_files(src_dir):
                target = dest_dir / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                if target.is_file():
                    target.unlink()
                shutil.copy2(src_dir / relative, target)
                count += 1
                if task_id is not None:
                    self.progress.update(task_id, advance=1, description=f"Copying {relative.as_posix()}")
        except OSError as e:
            raise StagingIOError(f"Failed to copy {src_dir} to {dest_dir}", e) from e
        finally:
            if task_id is not None:
                self.progress.remove_task(task_id)

        logger.debug(f"Copied {count} files to {dest_dir}")
        return count

    def closest_common_parent(self, root: Union[str, Path]) -> Path:
        return closest_common_parent(root)
