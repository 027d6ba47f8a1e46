"""Tests for specref.parser.loader."""

from __future__ import annotations

import io
from pathlib import Path

import httpx
import pytest

from specref.exceptions import SpecParseError
from specref.parser.loader import hint_from_name, load_source, parse_content

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

SPEC_URL = "https://specs.example.com/openapi.yaml"


def serve(status: int, text: str = "") -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status, text=text))


# ---------------------------------------------------------------------------
# load_source
# ---------------------------------------------------------------------------


class TestLoadFile:
    def test_fixture_is_read_unparsed(self) -> None:
        path = str(FIXTURES_DIR / "petstore_split.yaml")
        node = load_source(path)
        assert node.file_name == path
        assert node.url is None
        assert node.parsed is None
        assert "https://specs.example.com/pet.yaml" in node.content

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_source(str(tmp_path / "absent.yaml"))

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_source(str(tmp_path))

    def test_blank_file(self, tmp_path: Path) -> None:
        blank = tmp_path / "blank.json"
        blank.write_text("\n\n  \n", encoding="utf-8")
        with pytest.raises(SpecParseError, match="empty"):
            load_source(str(blank))


class TestLoadStdin:
    def test_reads_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('{"openapi": "3.1.0"}'))
        node = load_source("-")
        assert node.file_name == "stdin"
        assert node.content == '{"openapi": "3.1.0"}'

    @pytest.mark.parametrize("text", ["", " \t\n"])
    def test_blank_stdin(self, monkeypatch: pytest.MonkeyPatch, text: str) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(text))
        with pytest.raises(SpecParseError, match="No input"):
            load_source("-")


class TestLoadUrl:
    def test_reads_body(self) -> None:
        node = load_source(SPEC_URL, transport=serve(200, "openapi: 3.1.0\n"))
        assert node.file_name == SPEC_URL
        assert node.url == SPEC_URL
        assert node.content == "openapi: 3.1.0\n"

    def test_follows_redirects(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old.yaml":
                return httpx.Response(301, headers={"Location": SPEC_URL})
            return httpx.Response(200, text="openapi: 3.1.0\n")

        node = load_source(
            "https://specs.example.com/old.yaml", transport=httpx.MockTransport(handler)
        )
        assert node.content == "openapi: 3.1.0\n"

    def test_http_error(self) -> None:
        with pytest.raises(SpecParseError, match="HTTP 404"):
            load_source(SPEC_URL, transport=serve(404))

    def test_network_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(SpecParseError, match="Failed to fetch"):
            load_source(SPEC_URL, transport=httpx.MockTransport(refuse))

    def test_blank_body(self) -> None:
        with pytest.raises(SpecParseError, match="empty"):
            load_source(SPEC_URL, transport=serve(200, "   "))


# ---------------------------------------------------------------------------
# hint_from_name
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "name, expected",
    [
        ("spec.json", "json"),
        ("spec.YAML", "yaml"),
        ("dir/spec.yml", "yaml"),
        ("https://example.com/pet.json?v=2#/Pet", "json"),
        ("https://example.com/pet", ""),
        ("stdin", ""),
    ],
)
def test_hint_from_name(name: str, expected: str) -> None:
    assert hint_from_name(name) == expected


# ---------------------------------------------------------------------------
# parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_json_document(self) -> None:
        assert parse_content('{"openapi": "3.1.0", "paths": {}}') == {
            "openapi": "3.1.0",
            "paths": {},
        }

    def test_yaml_document(self) -> None:
        text = "components:\n  schemas:\n    Pet:\n      type: object\n"
        assert parse_content(text) == {"components": {"schemas": {"Pet": {"type": "object"}}}}

    def test_yaml_hint(self) -> None:
        assert parse_content("type: string", hint="yaml") == {"type": "string"}

    def test_json_hint_rejects_yaml(self) -> None:
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            parse_content("type: string", hint="json")

    def test_neither_format(self) -> None:
        with pytest.raises(SpecParseError, match="Failed to parse") as info:
            parse_content("}{not valid at all][")
        assert "JSON error" in str(info.value)
        assert "YAML error" in str(info.value)

    @pytest.mark.parametrize(
        "text, hint, kind",
        [
            ('"just a string"', "", "str"),
            ("- a\n- b\n", "yaml", "list"),
            ("---\n", "yaml", "empty document"),
        ],
    )
    def test_top_level_must_be_mapping(self, text: str, hint: str, kind: str) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object") as info:
            parse_content(text, hint=hint)
        assert kind in str(info.value)

    def test_missing_content(self) -> None:
        with pytest.raises(SpecParseError, match="no content"):
            parse_content(None)
