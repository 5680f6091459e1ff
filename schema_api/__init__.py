"""schema-api - declarative, schema-driven HTTP API toolkit.

One resource configuration (paths, parameters, request and response shapes
declared as pydantic models) drives both sides of an HTTP API:

- **client**: callable actions that build, authenticate, throttle, retry and
  validate requests, always returning an ``ApiResponse`` envelope
- **server**: an ASGI router that matches paths and methods, validates and
  coerces parameters into a handler context and shapes handler results
- **resources**: the configuration model and its setup-time compiler
- **core**: settings, logging, exceptions and the schema adapter shared by both
"""

from schema_api.client.auth import ApiKeyAuth, BasicAuth, BearerTokenAuth
from schema_api.client.client import ApiClient, client
from schema_api.client.response import ApiResponse
from schema_api.client.throttle import FixedThrottle
from schema_api.core.config import Settings, get_settings
from schema_api.core.context import get_correlation_id
from schema_api.core.exceptions import (
    ConfigurationError,
    InvalidTokenSchemaError,
    ParamsValidationError,
    SchemaApiError,
)
from schema_api.core.types import Auth, Throttle
from schema_api.resources.compiler import compile_config
from schema_api.resources.models import (
    ActionConfig,
    ApiConfig,
    ClientConfig,
    ResourceConfig,
    ServerConfig,
    resource,
)
from schema_api.server.context import ActionHandlerContext
from schema_api.server.results import HandlerError, HandlerOk
from schema_api.server.router import ApiRouter, serve

__all__ = [
    "ActionConfig",
    "ActionHandlerContext",
    "ApiClient",
    "ApiConfig",
    "ApiKeyAuth",
    "ApiResponse",
    "ApiRouter",
    "Auth",
    "BasicAuth",
    "BearerTokenAuth",
    "ClientConfig",
    "ConfigurationError",
    "FixedThrottle",
    "HandlerError",
    "HandlerOk",
    "InvalidTokenSchemaError",
    "ParamsValidationError",
    "ResourceConfig",
    "SchemaApiError",
    "ServerConfig",
    "Settings",
    "Throttle",
    "client",
    "compile_config",
    "get_correlation_id",
    "get_settings",
    "resource",
    "serve",
]
