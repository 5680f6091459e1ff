"""Setup-time compilation of an API configuration.

``compile_config`` checks a configuration once, before any request is made
or served, and precomputes the path templates and the route order:

- every path starts with ``/``
- no two resources share a path once placeholders are normalized
- no placeholder appears twice in one path
- the placeholders of a path and the keys of its URL params schema are the
  same set (alias, else field name)
- ``get`` and ``head`` actions declare no body

Routes are tried from the most specific to the least: fewest placeholders
first, then most static segments, then declaration order.
"""

from dataclasses import dataclass, field
from typing import Final

from loguru import logger

from schema_api.core.exceptions import ConfigurationError, ErrorCode
from schema_api.core.schema import schema_keys
from schema_api.params.paths import PathTemplate
from schema_api.resources.models import ActionConfig, ApiConfig, ResourceConfig

BODYLESS_METHODS: Final[frozenset[str]] = frozenset({"get", "head"})


@dataclass(frozen=True, slots=True)
class CompiledResource:
    """A validated resource with its parsed path template."""

    name: str
    config: ResourceConfig
    template: PathTemplate
    declaration_index: int

    @property
    def priority(self) -> tuple[int, int, int]:
        """Sort key, lower routes first."""
        return (
            len(self.template.params),
            -self.template.static_segment_count,
            self.declaration_index,
        )

    def action(self, method: str) -> ActionConfig | None:
        """Return the action configured for ``method``, if any."""
        return self.config.actions.get(method.lower())  # type: ignore[call-overload]


@dataclass(frozen=True, slots=True)
class CompiledConfig:
    """Compiled resources, by name and in route order."""

    config: ApiConfig
    resources: dict[str, CompiledResource] = field(default_factory=dict)
    routes: tuple[CompiledResource, ...] = ()


def _compile_resource(name: str, config: ResourceConfig, index: int) -> CompiledResource:
    context = {"resource": name, "path": config.path}

    if not config.path.startswith("/"):
        msg = f"Path of resource '{name}' must start with '/': {config.path!r}"
        raise ConfigurationError(msg, context=context)

    template = PathTemplate.parse(config.path)

    seen: set[str] = set()
    for param in template.params:
        if param in seen:
            msg = f"Placeholder '{param}' appears more than once in {config.path!r}"
            raise ConfigurationError(
                msg, error_code=ErrorCode.PATH_PARAMS_MISMATCH, context=context
            )
        seen.add(param)

    declared = (
        schema_keys(config.url_params_schema)
        if config.url_params_schema is not None
        else frozenset()
    )
    if seen != declared:
        missing = sorted(seen - declared)
        extra = sorted(declared - seen)
        msg = (
            f"Placeholders of resource '{name}' do not match its URL params schema "
            f"(not in schema: {missing}, not in path: {extra})"
        )
        raise ConfigurationError(
            msg,
            error_code=ErrorCode.PATH_PARAMS_MISMATCH,
            context={**context, "not_in_schema": missing, "not_in_path": extra},
        )

    for method, action in config.actions.items():
        if method in BODYLESS_METHODS and action.body_schema is not None:
            msg = f"Action '{method}' of resource '{name}' cannot declare a body"
            raise ConfigurationError(msg, context={**context, "method": method})

    return CompiledResource(
        name=name, config=config, template=template, declaration_index=index
    )


def compile_config(config: ApiConfig) -> CompiledConfig:
    """Validate an API configuration and precompute its routes.

    Args:
        config: The configuration to compile.

    Returns:
        CompiledConfig: Resources by name and the route order.

    Raises:
        ConfigurationError: If the configuration is inconsistent.
    """
    resources: dict[str, CompiledResource] = {}
    by_path: dict[str, str] = {}

    for index, (name, resource_config) in enumerate(config.resources.items()):
        compiled = _compile_resource(name, resource_config, index)

        existing = by_path.get(compiled.template.canonical)
        if existing is not None:
            msg = (
                f"Resources '{existing}' and '{name}' share the path "
                f"{compiled.template.canonical!r}"
            )
            raise ConfigurationError(
                msg,
                error_code=ErrorCode.DUPLICATE_PATH,
                context={"resources": [existing, name], "path": compiled.template.canonical},
            )
        by_path[compiled.template.canonical] = name
        resources[name] = compiled

    routes = tuple(sorted(resources.values(), key=lambda item: item.priority))
    logger.debug(
        "Compiled {} resources: {}",
        len(routes),
        ", ".join(f"{route.name}={route.template.canonical}" for route in routes),
    )

    return CompiledConfig(config=config, resources=resources, routes=routes)
