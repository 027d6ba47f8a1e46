"""Tests for specref.parser.expander."""

from __future__ import annotations

import asyncio
import json

import pytest

from specref.exceptions import SpecParseError
from specref.models import FetchResult, FetchStatus, SpecNode
from specref.parser.expander import get_adjacent_and_missing

COMMON = "https://specs.example.com/common.json"
PET = "https://specs.example.com/pet.json"


def _root() -> SpecNode:
    doc = {
        "paths": {
            "/pets": {
                "get": {
                    "parameters": [{"$ref": f"{COMMON}#/components/parameters/Limit"}],
                    "responses": {
                        "200": {"$ref": f"{PET}#/components/responses/Pet"},
                        "default": {"$ref": "#/components/responses/Error"},
                    },
                }
            }
        },
        "components": {"schemas": {"Tag": {"$ref": f"{COMMON}#/components/schemas/Tag"}}},
    }
    return SpecNode(file_name="root.json", content=json.dumps(doc))


def _expand(node, downloaded, resolver, **kwargs):
    return asyncio.run(get_adjacent_and_missing(node, downloaded, "test", resolver, **kwargs))


class TestGetAdjacentAndMissing:
    def test_downloads_each_distinct_target_once(self, make_remote) -> None:
        remote = make_remote({COMMON: "{}", PET: "{}"})
        downloaded: dict[str, FetchResult] = {}
        adjacency = _expand(_root(), downloaded, remote)
        assert [n.file_name for n in adjacency.graph_adj] == [COMMON, PET]
        assert adjacency.missing_nodes == []
        assert sorted(remote.calls) == [COMMON, PET]
        assert set(downloaded) == {COMMON, PET}

    def test_neighbours_carry_content_and_url(self, make_remote) -> None:
        adjacency = _expand(_root(), {}, make_remote({COMMON: '{"a": 1}', PET: "{}"}))
        common = adjacency.graph_adj[0]
        assert common.url == COMMON
        assert common.content == '{"a": 1}'
        assert common.parsed is None

    def test_cache_hits_are_not_downloaded(self, make_remote) -> None:
        remote = make_remote({COMMON: "{}"})
        downloaded = {PET: FetchResult(file_name=PET, content="{}")}
        adjacency = _expand(_root(), downloaded, remote)
        assert remote.calls == [COMMON]
        # fresh downloads first, cache hits after
        assert [n.file_name for n in adjacency.graph_adj] == [COMMON, PET]

    def test_failures_become_missing(self, make_remote) -> None:
        remote = make_remote({COMMON: None, PET: RuntimeError("boom")})
        downloaded: dict[str, FetchResult] = {}
        adjacency = _expand(_root(), downloaded, remote)
        assert adjacency.graph_adj == []
        assert [m.path for m in adjacency.missing_nodes] == [COMMON, PET]
        assert downloaded[COMMON].status is FetchStatus.NOT_FOUND
        assert downloaded[PET].status is FetchStatus.ERROR

    def test_cached_failure_is_missing_again(self, make_remote) -> None:
        remote = make_remote({COMMON: "{}"})
        downloaded = {PET: FetchResult(file_name=PET, status=FetchStatus.NOT_FOUND)}
        adjacency = _expand(_root(), downloaded, remote)
        assert [m.path for m in adjacency.missing_nodes] == [PET]
        assert PET not in remote.calls

    def test_no_remote_refs(self, make_remote) -> None:
        remote = make_remote({})
        node = SpecNode(file_name="a.yaml", content="x:\n  $ref: '#/y'\ny: {}\n")
        adjacency = _expand(node, {}, remote)
        assert adjacency.graph_adj == [] and adjacency.missing_nodes == []
        assert node.parsed == {"x": {"$ref": "#/y"}, "y": {}}
        assert remote.calls == []

    def test_sets_parsed_tree(self, make_remote) -> None:
        node = _root()
        _expand(node, {}, make_remote({COMMON: "{}", PET: "{}"}))
        assert node.parsed["paths"]["/pets"]["get"]["parameters"][0]["$ref"].startswith(COMMON)

    def test_already_parsed_node_is_not_reparsed(self, make_remote) -> None:
        node = SpecNode(file_name="a", content="not parsed", parsed={"s": {"$ref": PET}})
        adjacency = _expand(node, {}, make_remote({PET: "{}"}))
        assert [n.file_name for n in adjacency.graph_adj] == [PET]

    def test_relocate_rewrites_refs_and_names(self, make_remote) -> None:
        def relocate(url: str) -> str:
            return url.replace("https://specs.example.com/", "local/")

        node = _root()
        adjacency = _expand(node, {}, make_remote({COMMON: "{}", PET: "{}"}), relocate=relocate)
        assert [n.file_name for n in adjacency.graph_adj] == ["local/common.json", "local/pet.json"]
        assert [n.url for n in adjacency.graph_adj] == [COMMON, PET]
        tag = node.parsed["components"]["schemas"]["Tag"]["$ref"]
        assert tag == "local/common.json#/components/schemas/Tag"

    def test_parse_error_propagates(self, make_remote) -> None:
        node = SpecNode(file_name="broken.json", content="{broken")
        with pytest.raises(SpecParseError):
            _expand(node, {}, make_remote({}))
