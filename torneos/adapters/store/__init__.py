"""Store adapters for torneo and categoria persistence.

Implementations support multiple backends:
- In-memory (default, zero-config)
- SQLite (single-file, survives restarts)
"""
