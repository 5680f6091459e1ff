"""Resource configuration and its compiler.

- **models**: ``ActionConfig``, ``ResourceConfig`` and the client/server configurations
- **compiler**: Setup-time validation and route ordering
"""
