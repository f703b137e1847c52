"""Fake implementations of core ports for testing.

These in-memory implementations allow core logic and adapters to be
tested without external dependencies:

- FakeTorneoStorePort: In-memory snapshot persistence with call tracking
- FakeCategoriaStorePort: In-memory category lookup with call tracking
- FakeGestionTorneosPort: Captured management operations for handler tests
"""

from .gestion import FakeGestionTorneosPort
from .store import FakeCategoriaStorePort, FakeTorneoStorePort

__all__ = [
    "FakeCategoriaStorePort",
    "FakeGestionTorneosPort",
    "FakeTorneoStorePort",
]
