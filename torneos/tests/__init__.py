"""Test suite for the torneos service.

Organized into three categories:

1. core/: Unit tests for the domain model and TorneoService
   - No external dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - In-memory and SQLite stores, API handlers, HTTP server

3. fakes/: Port implementations for testing
   - In-memory implementations of the store and service ports
"""
