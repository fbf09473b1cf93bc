# Middleware package init
"""
Side Quest Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    Request ID runs first so the access log line carries the id; the id is
    written to the response headers on the way out.
"""
