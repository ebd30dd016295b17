"""Core domain modules.

- types: the Post record and field limits
- persistence: persistence boundary (protocol, errors, validation)
- storage: concrete persistence implementations (SQL, in-memory)
- health: backend health checks
"""
