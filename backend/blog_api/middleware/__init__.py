# Middleware package init
"""
Blog API — Middleware Package
===============================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → Route Handler

    1. Request ID: Assign correlation ID used by logs and error bodies
    2. Logging: Log method, path, status and duration with that ID
"""
