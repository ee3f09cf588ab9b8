"""API Layer — FastAPI routes, channel endpoint, dependencies, error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to the persistence gateway and delivery router
"""
