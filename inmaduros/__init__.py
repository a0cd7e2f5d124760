"""
Los Inmaduros Backend — Application Package Initializer
========================================================

What: Backend of the Los Inmaduros skating club.
Who:  Imported by uvicorn (inmaduros.main:app), Alembic, the seed command
      and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │      Auth (Clerk JWT dependency)    │  ← caller identity, roles
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← ownership, state machines
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services only flush; the request-scoped session commits once the
    handler returns, so a failed request never leaves half its writes.
"""

__version__ = "1.0.0"
