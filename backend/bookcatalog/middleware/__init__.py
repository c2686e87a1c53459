# Middleware package init
"""
Book Catalog — Middleware Package
===================================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

The request id is set first so the access log line and any error body
carry it.
"""
