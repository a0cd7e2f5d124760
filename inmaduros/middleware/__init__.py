# Middleware package init
"""
Los Inmaduros Backend — Middleware Package
===========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so even a 429 carries a correlation ID
    2. Rate Limit rejects abusive clients before any real work
    3. Logging measures the time spent in the application
"""
