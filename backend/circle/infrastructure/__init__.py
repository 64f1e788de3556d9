"""Infrastructure Layer — database sessions, asset hosting, identity and logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - External failures are mapped to result values or CircleError subclasses

Design Decisions:
    - Thin wrappers over raw clients (ADR: ExMA single responsibility)
"""
