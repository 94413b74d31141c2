"""Services Layer — project sync and messaging over one request's DB session.

Invariants:
    - Each public write is one transaction: commit on success, rollback on any failure
    - SQLAlchemy failures surface as DatabaseError, never as raw driver exceptions

Design Decisions:
    - One service per aggregate boundary (project document, chat) for locality
"""
