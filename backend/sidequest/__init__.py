"""
Side Quest Backend — Application Package Initializer
====================================================

What: Marks the `sidequest` directory as a Python package.
Who:  Used by uvicorn (`sidequest.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │       Routes (HTTP Surface)         │  ← parsing, status codes
    ├─────────────────────────────────────┤
    │     CardService (orchestration)     │  ← validate, upload, insert, delete
    ├─────────────────────────────────────┤
    │  Gateways: storage / cards / LLM    │  ← one external service each
    └─────────────────────────────────────┘

    Gateways are built once in the application lifespan and injected into
    the service per request through FastAPI dependencies.
"""

__version__ = "1.0.0"
