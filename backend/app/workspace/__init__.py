"""Workspace Layer — client-side state, autosave and polling for one open project.

Invariants:
    - Everything here runs on one asyncio loop; Working Store mutations are synchronous
    - Only HTTP calls suspend; the UI never awaits a save to keep editing
    - Closing a workspace cancels polling but never an armed or in-flight save

Design Decisions:
    - Separate from services/: services run inside a request's DB session,
      workspace code runs in the client process and talks HTTP (ADR: two sides
      of the Load/Save boundary, one shared codec)
"""
