"""
mcsi - Minecraft server installer for modpacks and mod loaders.

This package installs and upgrades Minecraft dedicated servers from
CurseForge and FTB modpacks or directly from the Forge, NeoForge and
Fabric installers, keeping a manifest of installed files so that
upgrades can back up and remove what the previous install owned.
"""

__version__ = "0.3.0"
__author__ = "mcsi contributors"
