"""Core Layer — domain logic for the ideation workspace, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, workspace/, infrastructure/, or db/
    - Document operations are pure; WorkingStore is the only stateful object here

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich):
      the same entities and codec serve the server sync path and the client store
"""
