"""HTTP API adapters.

Provides the REST endpoints for torneos and categorias:
- Create, read, update and cancel torneos
- List an organizer's torneos with filters and pagination
- List active categorias
"""
