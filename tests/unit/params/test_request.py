"""Unit tests for URL, header and body assembly."""

from urllib.parse import parse_qsl

import orjson
import pytest

from schema_api.core.constants import FORM_CONTENT_TYPE, JSON_CONTENT_TYPE
from schema_api.params.paths import PathTemplate
from schema_api.params.request import (
    build_body,
    build_url,
    content_type_for,
    dump_body,
    merge_headers,
)
from tests.fixtures.pokemon import NewPokemon


@pytest.mark.unit
class TestBuildUrl:
    """Tests for build_url()."""

    def test_base_path_and_query(self) -> None:
        """Verify path substitution and query string order."""
        url = build_url(
            "https://pokeapi.test/api/v2",
            PathTemplate.parse("/pokemon/{name}"),
            {"name": "pikachu"},
            {"limit": 5, "shiny": False},
        )

        assert url == "https://pokeapi.test/api/v2/pokemon/pikachu?limit=5&shiny=false"

    def test_trailing_slash_on_base_url(self) -> None:
        """Verify a trailing slash on the base URL is not doubled."""
        url = build_url("https://pokeapi.test/", PathTemplate.parse("/pokemon"))

        assert url == "https://pokeapi.test/pokemon"

    def test_no_query_when_empty(self) -> None:
        """Verify an empty search group adds no question mark."""
        url = build_url("https://pokeapi.test", PathTemplate.parse("/pokemon"), None, {})

        assert url == "https://pokeapi.test/pokemon"

    def test_escaping_is_opt_in(self) -> None:
        """Verify values are percent-encoded only when requested."""
        template = PathTemplate.parse("/search/{term}")

        raw = build_url("https://x.test", template, {"term": "a b"}, {"q": "c&d"})
        escaped = build_url(
            "https://x.test", template, {"term": "a b"}, {"q": "c&d"}, escape=True
        )

        assert raw == "https://x.test/search/a b?q=c&d"
        assert escaped == "https://x.test/search/a%20b?q=c%26d"


@pytest.mark.unit
class TestMergeHeaders:
    """Tests for merge_headers()."""

    def test_later_sources_win_case_insensitively(self) -> None:
        """Verify overrides ignore header name case."""
        merged = merge_headers(
            {"Content-Type": "application/json", "Accept": "*/*"},
            None,
            {"content-type": "text/plain"},
        )

        assert merged == {"content-type": "text/plain", "Accept": "*/*"}

    def test_values_are_stringified(self) -> None:
        """Verify typed header values become text."""
        assert merge_headers({"x-trainer-id": 7, "x-shiny": True}) == {
            "x-trainer-id": "7",
            "x-shiny": "true",
        }


@pytest.mark.unit
class TestBuildBody:
    """Tests for build_body() and dump_body()."""

    def test_json_body(self) -> None:
        """Verify JSON bodies are encoded with orjson."""
        body = build_body(dump_body(NewPokemon(name="eevee", level=5)), "JSON")

        assert body is not None
        assert orjson.loads(body) == {"name": "eevee", "level": 5, "shiny": False}

    def test_form_body(self) -> None:
        """Verify form bodies string-coerce every value and skip None."""
        body = build_body(
            {"name": "eevee", "level": 5, "shiny": True, "nick": None},
            "URLSearchParams",
        )

        assert body is not None
        assert parse_qsl(body) == [("name", "eevee"), ("level", "5"), ("shiny", "true")]

    def test_no_body(self) -> None:
        """Verify None means no body at all."""
        assert build_body(None, "JSON") is None

    @pytest.mark.parametrize(
        ("body_type", "expected"),
        [("JSON", JSON_CONTENT_TYPE), ("URLSearchParams", FORM_CONTENT_TYPE)],
    )
    def test_content_type_for(self, body_type: str, expected: str) -> None:
        """Verify the Content-Type derived from the body type."""
        assert content_type_for(body_type) == expected  # type: ignore[arg-type]
