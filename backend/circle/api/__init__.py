"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes map manager results to 200/400/404 and add no diagnostic detail

Design Decisions:
    - Thin routes delegate to managers (ADR: ExMA impureim sandwich)
"""
