"""
GeoMind Test Suite.

- unit/: store, storage, location cursor, chat log, gateway, map adapter and
  controller tests
- integration/: HTTP API tests through FastAPI's TestClient
- conftest.py: shared fixtures and fake assistant gateways

Run tests with: pytest
"""
