"""URL and parameter engine shared by the client and the router.

- **paths**: Placeholder parsing, URL substitution and request path matching
- **request**: URL, header and body assembly for outgoing requests
"""
