"""Services Layer — managers that orchestrate stores and the asset store.

Invariants:
    - One manager per aggregate, constructed per request around one AsyncSession
    - Managers return result values; routes decide the HTTP status

Design Decisions:
    - Shared post-image lifecycle and feed projection live in their own modules so
      GroupManager and PostManager use the same remote-first rules
"""
