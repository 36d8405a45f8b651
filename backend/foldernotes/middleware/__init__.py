# Middleware package init
"""
FolderNotes Backend — Middleware Package
=========================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [Body Size Limit] → [GZip] → [CORS] → Route

    1. Request ID first so every later log line carries it
    2. Logging wraps everything below, including 413 rejections
    3. Body size limit rejects oversized uploads before routing
    4. GZip and CORS are FastAPI/Starlette built-ins
"""
