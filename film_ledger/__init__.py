"""
Film Ledger — Package Initializer
=================================

What: Preference and interaction-ledger core of the film review backend.
Who:  Used by the request layer (routing, validation, auth live elsewhere),
      by the scheduler process and by pytest.

Architecture Note:
    The package follows a layered layout:

    ┌─────────────────────────────────────┐
    │      Services (Business Logic)      │  ← preferences, counters, ledger
    ├─────────────────────────────────────┤
    │   Repositories (Storage Contract)   │  ← LedgerRepository + SQLAlchemy
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services only talk to the repository contract, so each layer can be
    tested on its own (mocked repository, or a throwaway SQLite file).
"""

__version__ = "1.0.0"
