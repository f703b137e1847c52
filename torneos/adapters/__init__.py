"""External adapters for the torneos service.

This package contains all external dependencies (SQLite, HTTP server,
request validation) and provides implementations of the core port
interfaces.

Adapter Organization:

- store/: Torneo and categoria persistence (in-memory, SQLite)
- api/: HTTP API handlers, request schemas and the HTTP server
"""
