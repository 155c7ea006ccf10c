"""Tests for staging a CurseForge pack."""

import asyncio

import pytest

from fakes import client_manifest_json, release, zip_bytes
from mcsi.catalog.models import ResolvedPair
from mcsi.exceptions import LoaderParseError, NoClientManifest
from mcsi.modpack import assembler as assembler_module
from mcsi.modpack.assembler import PackAssembler
from mcsi.version import LoaderKind, McVersion

PROJECT = 100


@pytest.fixture
def installed_loaders(monkeypatch):
    calls = []

    async def fake_install_loader(descriptor, mc_version, target_dir, stager, java_executable=None):
        calls.append((descriptor, mc_version))
        (target_dir / "server.jar").write_text("loader")
        return target_dir / "server.jar"

    monkeypatch.setattr(assembler_module, "install_loader", fake_install_loader)
    return calls


def test_client_only_release_downloads_required_mods(context, stager, downloader, catalog, installed_loaders) -> None:
    client = release(10, "Pack 1.0")
    downloader.payloads[client.url] = zip_bytes({
        "manifest.json": client_manifest_json("1.19.2", "forge-43.2.21", [
            (200, 2001, True),
            (300, 3001, True),
            (400, 4001, False),
        ]),
        "overrides/config/a.toml": b"a = 1",
        "overrides/mods/bundled.jar": b"jar",
    })
    catalog.add_project(200, class_id=6)
    catalog.add_file(200, release(2001, "Mod A", file_name="mod-a.jar"))
    catalog.add_project(300, class_id=12)
    catalog.add_file(300, release(3001, "Textures", file_name="textures.zip"))

    assembled = asyncio.run(PackAssembler(context, catalog, stager).assemble(ResolvedPair(client)))

    staging = assembled.staging_dir
    assert staging == context.work_dir
    assert (staging / "config" / "a.toml").read_text() == "a = 1"
    assert sorted(p.name for p in (staging / "mods").iterdir()) == ["bundled.jar", "mod-a.jar"]
    assert assembled.mod_count == 1
    assert not assembled.from_server_pack
    assert ("project", 400) not in catalog.calls
    assert installed_loaders[0][0].kind is LoaderKind.FORGE
    assert installed_loaders[0][1] == McVersion(1, 19, 2)
    # scratch is gone, the archive was not left behind
    assert not context.client_dir.exists()
    assert not (context.mcsi_dir / client.file_name).exists()


def test_server_pack_staging_comes_from_content_root(context, stager, downloader, catalog, installed_loaders) -> None:
    client = release(10, "Pack 1.0")
    server = release(11, "Pack 1.0 Server", is_server_pack=True, parent_project_file_id=10)
    downloader.payloads[client.url] = zip_bytes({
        "manifest.json": client_manifest_json("1.20.1", "fabric-0.14.21", [(200, 2001, True)]),
    })
    downloader.payloads[server.url] = zip_bytes({
        "Pack Server/mods/x.jar": b"x",
        "Pack Server/config/c.toml": b"c",
        "Pack Server/start.sh": b"#!/bin/sh",
    })

    assembled = asyncio.run(
        PackAssembler(context, catalog, stager).assemble(ResolvedPair(server, companion=client))
    )

    staging = assembled.staging_dir
    assert (staging / "mods" / "x.jar").is_file()
    assert (staging / "start.sh").is_file()
    assert not (staging / "Pack Server").exists()
    assert assembled.from_server_pack
    assert catalog.calls == []
    assert installed_loaders[0][0].kind is LoaderKind.FABRIC
    assert not context.server_dir.exists()


def test_server_pack_without_client_has_no_manifest(context, stager, downloader, catalog, installed_loaders) -> None:
    server = release(11, "Lonely Server", is_server_pack=True)
    downloader.payloads[server.url] = zip_bytes({"start.sh": b""})

    with pytest.raises(NoClientManifest):
        asyncio.run(PackAssembler(context, catalog, stager).assemble(ResolvedPair(server)))

    assert not context.server_dir.exists()
    assert installed_loaders == []


def test_manifest_without_primary_loader(context, stager, downloader, catalog, installed_loaders) -> None:
    client = release(10, "Pack")
    downloader.payloads[client.url] = zip_bytes({
        "manifest.json": b'{"minecraft": {"version": "1.19.2", "modLoaders": []}, "files": []}',
    })

    with pytest.raises(LoaderParseError):
        asyncio.run(PackAssembler(context, catalog, stager).assemble(ResolvedPair(client)))
