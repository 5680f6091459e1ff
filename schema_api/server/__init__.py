"""Server side: an ASGI router driven by the same configuration as the client.

- **router**: ``ApiRouter`` and ``serve``
- **context**: Handler context construction from a request
- **results**: ``HandlerOk`` and ``HandlerError``
- **responses**: Response helpers carrying the CORS header
"""
