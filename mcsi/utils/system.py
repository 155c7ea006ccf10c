"""
System utilities for cross-platform support and Java management.

This module provides utilities for detecting the operating system and
locating Java installations for loader and pack installers.
"""

import asyncio
import logging
import os
import platform
import re
import shutil
import stat
import subprocess
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from packaging import version as pkg_version

from ..constants import DEFAULT_JAVA_VERSION, JAVA_VERSION_THRESHOLDS
from ..exceptions import InstallerProcessError
from ..version import McVersion

logger = logging.getLogger(__name__)

# Lines of installer output kept for error messages
OUTPUT_TAIL_LINES = 20


class SystemInfo:
    """Provides information about the current system."""

    @staticmethod
    def get_platform() -> str:
        """Get the current platform (linux, darwin, windows)."""
        return platform.system().lower()

    @staticmethod
    def ftb_target_os() -> str:
        """Name of the current platform in FTB server installer URLs."""
        if SystemInfo.get_platform() == "windows":
            return "windows"
        return "linux"

    @staticmethod
    def executable_name(stem: str) -> str:
        """Add the platform's executable suffix to ``stem``."""
        if SystemInfo.get_platform() == "windows":
            return f"{stem}.exe"
        return stem

    @staticmethod
    def make_executable(path: Path) -> None:
        """Mark ``path`` executable for its owner."""
        mode = os.stat(path).st_mode
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IRUSR)


class JavaManager:
    """Locates a Java runtime suitable for a Minecraft version."""

    # Directory names such as jdk-17.0.2, java-21-openjdk-amd64, temurin-8, jdk1.8.0_391
    _JVM_DIR_RE = re.compile(r'(?:jdk|jre|java|temurin|zulu|openjdk)[-_]?(?:1\.)?(\d+)', re.IGNORECASE)
    _VERSION_OUTPUT_RE = re.compile(r'version "(?:1\.)?(\d+)')

    @staticmethod
    def required_java_version(mc_version: McVersion) -> int:
        """Java major version the server for ``mc_version`` runs on."""
        parsed = mc_version.to_packaging()
        for minimum, java_version in JAVA_VERSION_THRESHOLDS:
            if parsed >= pkg_version.Version(minimum):
                return java_version
        return DEFAULT_JAVA_VERSION

    @staticmethod
    def jvm_search_roots() -> List[Path]:
        if SystemInfo.get_platform() == "darwin":
            return [Path("/Library/Java/JavaVirtualMachines")]
        return [Path("/usr/lib/jvm"), Path("/usr/java"), Path("/opt/java")]

    @staticmethod
    def find_java_installations() -> Dict[int, Path]:
        """Map Java major versions to installation homes found on this machine."""
        homes: Dict[int, Path] = {}

        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            detected = JavaManager.get_java_version(str(Path(java_home) / "bin" / "java"))
            if detected is not None:
                homes[detected] = Path(java_home)

        for root in JavaManager.jvm_search_roots():
            if not root.is_dir():
                continue
            for entry in sorted(root.iterdir()):
                match = JavaManager._JVM_DIR_RE.search(entry.name)
                if not entry.is_dir() or match is None:
                    continue
                # macOS bundles keep the runtime under Contents/Home
                bundle_home = entry / "Contents" / "Home"
                homes.setdefault(int(match.group(1)), bundle_home if bundle_home.is_dir() else entry)

        logger.debug(f"Java installations: {homes}")
        return homes

    @staticmethod
    def get_java_executable(
        java_version: Optional[int] = None,
        configured: Optional[str] = None,
    ) -> Optional[str]:
        """Pick the java binary to run installers with.

        An explicitly configured executable wins, then an installation of
        ``java_version``, then ``java`` on PATH.
        """
        if configured:
            return configured

        if java_version is not None:
            home = JavaManager.find_java_installations().get(java_version)
            if home is not None:
                candidate = home / "bin" / SystemInfo.executable_name("java")
                if candidate.is_file():
                    return str(candidate)

        return shutil.which("java")

    @staticmethod
    def require_java_executable(
        mc_version: McVersion,
        configured: Optional[str] = None,
    ) -> str:
        """Like ``get_java_executable`` but raise when no Java is available."""
        required = JavaManager.required_java_version(mc_version)
        java_exe = JavaManager.get_java_executable(required, configured)
        if java_exe is None:
            raise InstallerProcessError(
                f"Java {required} is required to install a server for Minecraft {mc_version}, "
                "but no java executable was found"
            )
        logger.info(f"Using Java at {java_exe} (Minecraft {mc_version} needs Java {required})")

        detected = JavaManager.get_java_version(java_exe)
        if detected is not None and detected < required:
            logger.warning(f"{java_exe} is Java {detected}, the installer may fail")
        return java_exe

    @staticmethod
    def get_java_version(java_executable: str) -> Optional[int]:
        """Major version reported by ``java -version``, or None if it cannot be run."""
        try:
            result = subprocess.run(
                [java_executable, "-version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=30,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Cannot run {java_executable}: {e}")
            return None

        match = JavaManager._VERSION_OUTPUT_RE.search(result.stdout)
        if match is None:
            logger.warning(f"Unrecognized version output from {java_executable}")
            return None
        return int(match.group(1))


async def run_process(
    args: Sequence[str],
    cwd: Path,
    tail_lines: int = OUTPUT_TAIL_LINES,
) -> Tuple[int, List[str]]:
    """Run an external installer, streaming its output to the log.

    Returns the exit code and the last ``tail_lines`` lines of output.
    """
    args = [str(arg) for arg in args]
    logger.debug(f"Running {' '.join(args)} in {cwd}")
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT
        )
    except OSError as e:
        raise InstallerProcessError(f"Failed to start {args[0]}", e) from e

    tail: Deque[str] = deque(maxlen=tail_lines)
    while True:
        line = await process.stdout.readline()
        if not line:
            break
        text = line.decode(errors="replace").rstrip()
        tail.append(text)
        logger.debug(text)

    returncode = await process.wait()
    return returncode, list(tail)
