"""
Biz-Niz Pro Test Suite.

- unit/: service, session, export, model and core tests
- integration/: route flows through FastAPI's TestClient
- conftest.py: Shared fixtures and the fake genai client

Run tests with: pytest
"""
