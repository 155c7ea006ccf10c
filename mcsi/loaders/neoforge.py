"""
NeoForge server installer.
"""

from ..constants import NEOFORGE_MAVEN_URL
from .base import MavenJarInstaller


class NeoForgeInstaller(MavenJarInstaller):
    """Installs a NeoForge server from the NeoForged Maven repository.

    NeoForge versions already encode the Minecraft version, so only the
    loader version appears in artifact names.
    """

    @property
    def loader_type(self) -> str:
        return "neoforge"

    @property
    def maven_url(self) -> str:
        return NEOFORGE_MAVEN_URL

    @property
    def long_version(self) -> str:
        return self.loader_version
