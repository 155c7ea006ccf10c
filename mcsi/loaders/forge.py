"""
Forge server installer.
"""

from ..constants import FORGE_MAVEN_URL
from .base import MavenJarInstaller


class ForgeInstaller(MavenJarInstaller):
    """Installs a Forge server from the Forge Maven repository."""

    @property
    def loader_type(self) -> str:
        return "forge"

    @property
    def maven_url(self) -> str:
        return FORGE_MAVEN_URL

    @property
    def long_version(self) -> str:
        return f"{self.mc_version.as_str()}-{self.loader_version}"
