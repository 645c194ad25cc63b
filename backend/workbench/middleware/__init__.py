# Middleware package init
"""
Workbench Backend: Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line and error body can carry it
    2. Logging: records status and duration with the request ID attached
    3. GZip / CORS: provided by FastAPI/Starlette
"""
