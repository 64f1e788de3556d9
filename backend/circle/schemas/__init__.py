"""Pydantic Schemas — DTOs returned outward and request bodies validated inward.

Invariants:
    - Schemas are the only shapes that leave the service layer
    - ORM entities never cross the HTTP boundary

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
