"""
Data models for catalog responses.

CurseForge ("Flame") and FTB payloads are parsed from their camelCase
JSON into plain dataclasses. Missing required keys raise CatalogError.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import FLAME_CDN_URL, FLAME_MOD_CLASS_ID
from ..exceptions import CatalogError


def _require(data: Dict[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise CatalogError(f"Malformed {kind}: missing '{key}'", e) from e


# CurseForge

@dataclass
class ProjectInfo:
    """Project metadata (``/mods/{id}``)."""

    id: int
    main_file_id: int
    class_id: Optional[int] = None
    name: str = ""

    @property
    def is_mod(self) -> bool:
        return self.class_id == FLAME_MOD_CLASS_ID

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectInfo':
        return cls(
            id=int(_require(data, "id", "project")),
            main_file_id=int(_require(data, "mainFileId", "project")),
            class_id=data.get("classId"),
            name=data.get("name", ""),
        )


@dataclass
class ReleaseFile:
    """One uploaded file of a project."""

    id: int
    display_name: str
    file_name: str
    download_url: Optional[str]
    is_server_pack: bool = False
    server_pack_file_id: Optional[int] = None
    parent_project_file_id: Optional[int] = None

    @property
    def url(self) -> str:
        """Download URL, derived from the CDN layout when the API omits it."""
        if self.download_url:
            return self.download_url
        file_id = str(self.id)
        return f"{FLAME_CDN_URL}/{file_id[:4]}/{file_id[4:]}/{self.file_name}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReleaseFile':
        server_pack_file_id = data.get("serverPackFileId")
        parent_project_file_id = data.get("parentProjectFileId")
        return cls(
            id=int(_require(data, "id", "file")),
            display_name=_require(data, "displayName", "file"),
            file_name=_require(data, "fileName", "file"),
            download_url=data.get("downloadUrl"),
            is_server_pack=bool(data.get("isServerPack", False)),
            server_pack_file_id=int(server_pack_file_id) if server_pack_file_id else None,
            parent_project_file_id=int(parent_project_file_id) if parent_project_file_id else None,
        )


@dataclass
class ResolvedPair:
    """A release and, when the catalog links one, its client/server companion.

    When a companion exists, the server pack is always ``primary``.
    """

    primary: ReleaseFile
    companion: Optional[ReleaseFile] = None

    @property
    def server(self) -> Optional[ReleaseFile]:
        for release in (self.primary, self.companion):
            if release is not None and release.is_server_pack:
                return release
        return None

    @property
    def client(self) -> Optional[ReleaseFile]:
        for release in (self.primary, self.companion):
            if release is not None and not release.is_server_pack:
                return release
        return None


@dataclass
class Pagination:
    index: int
    page_size: int
    result_count: int
    total_count: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Pagination':
        return cls(
            index=int(data.get("index", 0)),
            page_size=int(data.get("pageSize", 0)),
            result_count=int(_require(data, "resultCount", "pagination")),
            total_count=int(_require(data, "totalCount", "pagination")),
        )


@dataclass
class FilesPage:
    files: List[ReleaseFile]
    pagination: Pagination

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilesPage':
        return cls(
            files=[ReleaseFile.from_dict(entry) for entry in _require(data, "data", "file list")],
            pagination=Pagination.from_dict(_require(data, "pagination", "file list")),
        )


@dataclass
class ModReference:
    """An entry of a client manifest's ``files`` list."""

    project_id: int
    file_id: int
    required: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModReference':
        return cls(
            project_id=int(_require(data, "projectID", "manifest file entry")),
            file_id=int(_require(data, "fileID", "manifest file entry")),
            required=bool(data.get("required", True)),
        )


@dataclass
class ModLoaderEntry:
    id: str
    primary: bool = False


@dataclass
class ClientManifest:
    """The ``manifest.json`` shipped at the root of a client pack archive."""

    minecraft_version: str
    mod_loaders: List[ModLoaderEntry] = field(default_factory=list)
    files: List[ModReference] = field(default_factory=list)

    @property
    def primary_loader(self) -> Optional[ModLoaderEntry]:
        return next((loader for loader in self.mod_loaders if loader.primary), None)

    @property
    def required_mods(self) -> List[ModReference]:
        return [entry for entry in self.files if entry.required]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientManifest':
        minecraft = _require(data, "minecraft", "client manifest")
        return cls(
            minecraft_version=_require(minecraft, "version", "client manifest"),
            mod_loaders=[
                ModLoaderEntry(id=_require(entry, "id", "mod loader"), primary=bool(entry.get("primary", False)))
                for entry in minecraft.get("modLoaders", [])
            ],
            files=[ModReference.from_dict(entry) for entry in data.get("files", [])],
        )


# FTB

@dataclass
class SearchResults:
    packs: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchResults':
        return cls(packs=[int(pack) for pack in data.get("packs") or []])


@dataclass
class Target:
    id: int
    name: str
    type: str
    version: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Target':
        return cls(
            id=int(data.get("id", 0)),
            name=data.get("name", ""),
            type=data.get("type", ""),
            version=data.get("version", ""),
        )


@dataclass
class PackVersion:
    id: int
    name: str
    type: str
    updated: int
    targets: List[Target] = field(default_factory=list)

    def targets_game_version(self, mc_version: str) -> bool:
        return any(target.type == "game" and target.version == mc_version for target in self.targets)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackVersion':
        return cls(
            id=int(_require(data, "id", "pack version")),
            name=data.get("name", ""),
            type=data.get("type", ""),
            updated=int(data.get("updated", 0)),
            targets=[Target.from_dict(target) for target in data.get("targets", [])],
        )


@dataclass
class PackDetails:
    id: int
    name: str
    versions: List[PackVersion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackDetails':
        return cls(
            id=int(data.get("id", 0)),
            name=data.get("name", ""),
            versions=[PackVersion.from_dict(entry) for entry in _require(data, "versions", "pack details")],
        )
