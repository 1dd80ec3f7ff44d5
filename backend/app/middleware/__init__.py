# Middleware package init
"""
Tree Leaves Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Body Limit] → [GZip] → [CORS] → Route Handler

    1. Request ID first so every later log line and error envelope carries it
    2. Logging wraps everything below it, so durations include the handler
    3. Body limit rejects oversized uploads before the handler reads them
    4. GZip and CORS are FastAPI's built-in middleware
"""
