"""Client side: callable actions returning ``ApiResponse`` envelopes.

- **client**: ``ApiClient`` and the ``client`` factory
- **pipeline**: Validation, auth, throttle, retry and decoding of one call
- **auth**: API key, basic and bearer token strategies
- **throttle**: Fixed-interval request pacing
- **response**: The ``ApiResponse`` envelope
"""
