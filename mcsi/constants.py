"""
Constants used throughout mcsi.

This module contains all hardcoded values used across the application
for easy maintenance and configuration.
"""

from typing import Dict, List

# Directory layout under the target directory
MCSI_DIR_NAME: str = ".mcsi"
WORK_DIR_NAME: str = "work_dir"
CLIENT_DIR_NAME: str = "client"
SERVER_DIR_NAME: str = "server"
LOGS_DIR_NAME: str = "logs"
BACKUPS_DIR_NAME: str = "backups"
MANIFEST_FILE_NAME: str = "manifest.json"
CLIENT_MANIFEST_FILE_NAME: str = "manifest.json"
OVERRIDES_DIR_NAME: str = "overrides"
MODS_DIR_NAME: str = "mods"

BACKUP_DIR_PREFIX: str = "backup-"
BACKUP_TIMESTAMP_FORMAT: str = "%Y-%m-%d-%H%M%S"

# Network settings
DEFAULT_TIMEOUT_SECONDS: float = 30.0
DOWNLOAD_TIMEOUT_SECONDS: float = 300.0
DOWNLOAD_CHUNK_SIZE: int = 8192
DOWNLOAD_MAX_RETRIES: int = 3

# CurseForge
FLAME_API_URL: str = "https://api.curseforge.com/v1"
FLAME_CDN_URL: str = "https://edge.forgecdn.net/files"
FLAME_PAGE_SIZE: int = 50
FLAME_MOD_CLASS_ID: int = 6

# FTB
FTB_API_URL: str = "https://api.modpacks.ch/public/modpack"
FTB_SEARCH_LIMIT: int = 8

# Loader installers
FORGE_MAVEN_URL: str = "https://maven.minecraftforge.net/net/minecraftforge/forge"
NEOFORGE_MAVEN_URL: str = "https://maven.neoforged.net/releases/net/neoforged/neoforge"
FABRIC_META_URL: str = "https://meta.fabricmc.net/v2/versions"

INSTALLER_JAR_NAME: str = "installer.jar"
SERVER_JAR_NAME: str = "server.jar"

# Java version mappings, first match on minimum Minecraft version wins
JAVA_VERSION_THRESHOLDS: List[tuple] = [
    ("1.20.5", 21),
    ("1.17", 17),
]

DEFAULT_JAVA_VERSION: int = 8

# Log levels accepted on the command line
LOG_LEVELS: List[str] = ["off", "error", "warn", "info", "debug", "trace"]
TRACE_LEVEL: int = 5

LOG_LEVEL_MAP: Dict[str, str] = {
    "error": "ERROR",
    "warn": "WARNING",
    "info": "INFO",
    "debug": "DEBUG",
    "trace": "TRACE",
}

# Version validation
VALID_VERSION_CHARS: str = r'^[a-zA-Z0-9._+\-]+$'
MAX_VERSION_LENGTH: int = 100
