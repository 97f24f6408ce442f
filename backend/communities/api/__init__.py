"""API Layer: FastAPI routes, dependency wiring and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses (or an empty body where documented)

Design Decisions:
    - Thin routes delegate to services; identity comes from the current_user_id dependency
"""
