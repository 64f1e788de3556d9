"""Persistence Gateway — async query/command methods over AsyncSession, one store per table family.

Invariants:
    - Stores never decide authorization; they answer queries and report affected rows
    - Every relationship is an explicit query (find_members, find_posts, ...)
    - Stores never commit implicitly; managers call commit() once per unit of work

Design Decisions:
    - Stores share the request's AsyncSession so a manager's multi-store unit of work
      commits atomically (ADR: one session per request)
"""
