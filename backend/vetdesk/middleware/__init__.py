# Middleware package init
"""
VetDesk Backend — Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation id for every log line of the request
    3. Logging: one access-log line per request, with status and duration
"""
