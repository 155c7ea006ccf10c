"""Tests for the FTB catalog client and install pipeline."""

import asyncio

import httpx
import pytest

from mcsi import manifest as manifest_store
from mcsi.catalog.ftb import FtbClient, build_search_query
from mcsi.catalog.models import PackDetails, PackVersion, SearchResults, Target
from mcsi.exceptions import InstallerProcessError, ReleaseNotFound, ValidationError
from mcsi.modpack.ftb import install_ftb_pack, resolve_pack_id, select_version
from mcsi.utils import system


def _version(version_id: int, updated: int, game: str = "1.20.1") -> PackVersion:
    return PackVersion(
        id=version_id,
        name=f"1.{version_id}",
        type="release",
        updated=updated,
        targets=[Target(id=1, name="minecraft", type="game", version=game)],
    )


class FakeFtbClient:

    def __init__(self, packs, details) -> None:
        self.packs = packs
        self.details = details
        self.searched = []

    async def search(self, terms):
        self.searched.append(list(terms))
        return SearchResults(packs=self.packs)

    async def get_pack_details(self, pack_id):
        return self.details[pack_id]

    def server_installer_url(self, pack_id, version_id, target_os):
        return f"https://ftb.example/{pack_id}/{version_id}/server/{target_os}"


def test_build_search_query_encodes_every_term() -> None:
    assert build_search_query(["direwolf20", "1.20", "a b"]) == "direwolf20+1.20+a+b"
    assert build_search_query(["one"]) == "one"
    assert build_search_query(["x", "&"]) == "x+%26"
    assert build_search_query(["a&b", "c#d"]) == "a%26b+c%23d"


def test_search_keeps_reserved_characters_in_first_term() -> None:
    seen = []

    def handler(request):
        seen.append(dict(request.url.params))
        return httpx.Response(200, json={"packs": []})

    client = FtbClient(transport=httpx.MockTransport(handler))

    async def scenario():
        async with client:
            return await client.search(["rock&roll", "2"])

    asyncio.run(scenario())

    assert seen == [{"term": "rock&roll 2"}]


def test_client_search_and_details() -> None:
    def handler(request):
        if request.url.path.endswith("/search/8"):
            assert request.url.params["term"] == "stone block"
            return httpx.Response(200, json={"packs": [5, 6]})
        return httpx.Response(200, json={"id": 5, "name": "Stoneblock", "versions": [
            {"id": 50, "name": "1.0", "type": "release", "updated": 10, "targets": []},
        ]})

    client = FtbClient(transport=httpx.MockTransport(handler))

    async def scenario():
        async with client:
            return await client.search(["stone", "block"]), await client.get_pack_details(5)

    results, details = asyncio.run(scenario())

    assert results.packs == [5, 6]
    assert details.versions[0].id == 50


class TestResolvePackId:

    def test_explicit_id_skips_search(self) -> None:
        client = FakeFtbClient([], {})
        assert asyncio.run(resolve_pack_id(client, pack_id=7)) == 7
        assert client.searched == []

    def test_first_hit(self) -> None:
        client = FakeFtbClient([3, 4], {})
        assert asyncio.run(resolve_pack_id(client, search_terms=["x"])) == 3

    def test_no_hits(self) -> None:
        with pytest.raises(ReleaseNotFound):
            asyncio.run(resolve_pack_id(FakeFtbClient([], {}), search_terms=["x"]))

    def test_mc_version_filters_hits(self) -> None:
        details = {
            3: PackDetails(id=3, name="Old", versions=[_version(30, 1, game="1.12.2")]),
            4: PackDetails(id=4, name="New", versions=[_version(40, 1, game="1.20.1")]),
        }
        client = FakeFtbClient([3, 4], details)

        assert asyncio.run(resolve_pack_id(client, search_terms=["x"], mc_version="1.20.1")) == 4


class TestSelectVersion:

    details = PackDetails(id=1, name="Pack", versions=[_version(10, 100), _version(12, 300), _version(11, 200)])

    def test_latest_is_most_recently_updated(self) -> None:
        assert select_version(self.details, "latest").id == 12

    def test_numeric_id(self) -> None:
        assert select_version(self.details, "11").id == 11

    def test_unknown_id(self) -> None:
        with pytest.raises(ReleaseNotFound):
            select_version(self.details, "99")

    def test_non_numeric(self) -> None:
        with pytest.raises(ValidationError):
            select_version(self.details, "1.0")


def test_install_runs_server_installer_into_staging(context, stager, monkeypatch) -> None:
    details = {9: PackDetails(id=9, name="Pack", versions=[_version(90, 1)])}
    client = FakeFtbClient([], details)
    runs = []

    async def fake_run_process(args, cwd, tail_lines=20):
        runs.append([str(arg) for arg in args])
        staging = args[3]
        (staging / "server.jar").write_text("ftb")
        return 0, []

    monkeypatch.setattr(system, "run_process", fake_run_process)

    result = asyncio.run(install_ftb_pack(context, client, stager, "latest", pack_id=9))

    installer_arg, *rest = runs[0]
    assert "serverinstall_9_90" in installer_arg
    assert rest == ["--auto", "--path", str(context.work_dir), "--nojava"]
    assert (context.target_dir / "server.jar").read_text() == "ftb"
    assert manifest_store.load(context.mcsi_dir) == result.manifest
    assert not any(p.name.startswith("serverinstall") for p in context.mcsi_dir.iterdir())


def test_install_failure_raises(context, stager, monkeypatch) -> None:
    client = FakeFtbClient([], {9: PackDetails(id=9, name="Pack", versions=[_version(90, 1)])})

    async def failing_run_process(args, cwd, tail_lines=20):
        return 2, ["boom"]

    monkeypatch.setattr(system, "run_process", failing_run_process)

    with pytest.raises(InstallerProcessError):
        asyncio.run(install_ftb_pack(context, client, stager, "90", pack_id=9))
    assert not (context.target_dir / "server.jar").exists()
