"""Unit tests for configuration compilation."""

import pytest
from pydantic import BaseModel, Field

from schema_api.core.exceptions import ConfigurationError
from schema_api.resources.compiler import compile_config
from schema_api.resources.models import ActionConfig, ApiConfig, resource
from tests.fixtures.pokemon import NewPokemon, PokemonName, pokemon_resources


class PokemonId(BaseModel):
    id: int


class MoveParams(BaseModel):
    name: str
    move: str


class AliasedId(BaseModel):
    trainer_id: int = Field(alias="trainer-id")


@pytest.mark.unit
class TestCompileConfig:
    """Tests for compile_config()."""

    def test_compiles_pokemon_resources(self) -> None:
        """Verify a consistent configuration compiles with templates."""
        compiled = compile_config(ApiConfig(resources=pokemon_resources()))

        assert set(compiled.resources) == {"pokemon", "pokemon_list"}
        assert compiled.resources["pokemon"].template.canonical == "/pokemon/{name}"
        assert compiled.resources["pokemon"].action("GET") is not None
        assert compiled.resources["pokemon"].action("delete") is None

    def test_duplicate_path_after_normalization(self) -> None:
        """Verify :id and {id} declarations of one path collide."""
        config = ApiConfig(
            resources={
                "first": resource("/pokemon/:id", url_params_schema=PokemonId),
                "second": resource("/pokemon/{id}", url_params_schema=PokemonId),
            }
        )

        with pytest.raises(ConfigurationError) as exc_info:
            compile_config(config)

        assert exc_info.value.error_code == "DUPLICATE_PATH"
        assert exc_info.value.context["resources"] == ["first", "second"]

    @pytest.mark.parametrize(
        ("path", "schema"),
        [
            ("/pokemon/{name}", None),
            ("/pokemon", PokemonName),
            ("/pokemon/{id}", PokemonName),
            ("/pokemon/{name}", MoveParams),
        ],
    )
    def test_placeholder_schema_mismatch(
        self, path: str, schema: type[BaseModel] | None
    ) -> None:
        """Verify placeholders and URL params schema keys must coincide."""
        config = ApiConfig(resources={"pokemon": resource(path, url_params_schema=schema)})

        with pytest.raises(ConfigurationError) as exc_info:
            compile_config(config)

        assert exc_info.value.error_code == "PATH_PARAMS_MISMATCH"

    def test_aliases_count_as_schema_keys(self) -> None:
        """Verify an aliased field satisfies its placeholder."""
        config = ApiConfig(
            resources={
                "trainer": resource("/trainers/{trainer-id}", url_params_schema=AliasedId)
            }
        )

        compiled = compile_config(config)

        assert compiled.resources["trainer"].template.params == ("trainer-id",)

    def test_duplicate_placeholder_rejected(self) -> None:
        """Verify one placeholder may not appear twice in a path."""
        config = ApiConfig(
            resources={"loop": resource("/a/{name}/b/{name}", url_params_schema=PokemonName)}
        )

        with pytest.raises(ConfigurationError, match="more than once"):
            compile_config(config)

    @pytest.mark.parametrize("method", ["get", "head"])
    def test_body_on_bodyless_method_rejected(self, method: str) -> None:
        """Verify GET and HEAD actions may not declare a body."""
        config = ApiConfig(
            resources={
                "pokemon": resource(
                    "/pokemon", {method: ActionConfig(body_schema=NewPokemon)}
                )
            }
        )

        with pytest.raises(ConfigurationError, match="cannot declare a body"):
            compile_config(config)

    def test_path_must_start_with_slash(self) -> None:
        """Verify relative paths are rejected."""
        config = ApiConfig(resources={"pokemon": resource("pokemon")})

        with pytest.raises(ConfigurationError, match="must start with"):
            compile_config(config)


@pytest.mark.unit
class TestRouteOrder:
    """Tests for the route priority order."""

    def test_literal_routes_precede_parametrized(self) -> None:
        """Verify /foo is tried before /{id} regardless of declaration order."""
        config = ApiConfig(
            resources={
                "by_id": resource("/{id}", url_params_schema=PokemonId),
                "foo": resource("/foo"),
            }
        )

        routes = compile_config(config).routes

        assert [route.name for route in routes] == ["foo", "by_id"]

    def test_more_static_segments_win(self) -> None:
        """Verify the more specific parametrized route is tried first."""
        config = ApiConfig(
            resources={
                "generic": resource("/{name}/{move}", url_params_schema=MoveParams),
                "moves": resource(
                    "/pokemon/{name}/moves", url_params_schema=PokemonName
                ),
                "pokemon": resource("/pokemon/{name}", url_params_schema=PokemonName),
            }
        )

        routes = compile_config(config).routes

        assert [route.name for route in routes] == ["moves", "pokemon", "generic"]

    def test_declaration_order_breaks_ties(self) -> None:
        """Verify equally specific routes keep their declaration order."""
        config = ApiConfig(
            resources={
                "b": resource("/b/{id}", url_params_schema=PokemonId),
                "a": resource("/a/{id}", url_params_schema=PokemonId),
            }
        )

        routes = compile_config(config).routes

        assert [route.name for route in routes] == ["b", "a"]
