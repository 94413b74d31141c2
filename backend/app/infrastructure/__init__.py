"""Infrastructure Layer — database access and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All database failures surface as DatabaseError

Design Decisions:
    - Resilient wrappers over raw engines (ADR: single responsibility)
"""
