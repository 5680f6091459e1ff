"""Core package shared by the client and server pipelines.

- **config**: Settings with environment support (base URL, retries, logging)
- **constants**: HTTP status codes, sentinel client codes and header names
- **context**: Correlation ID propagation for request-scoped logging
- **error_context**: Redaction of sensitive headers before logging
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Loguru setup with console and JSON formatters
- **schema**: Validation and string coercion on top of pydantic
- **types**: Type aliases for parameter bags and header maps
"""
