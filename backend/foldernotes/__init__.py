"""
FolderNotes Backend — Application Package Initializer
=====================================================

What: Marks the `foldernotes` directory as a Python package.
Why:  Enables module imports like `from foldernotes.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps a layered structure:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Folder / Note stores)   │  ← CRUD rules, cascade, bootstrap
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Store handle)      │  ← Async engine + sessions
    └─────────────────────────────────────┘

    Routes translate HTTP to service calls; services own every rule about
    folders, notes and their embedded files; the store handle owns the
    connection lifecycle.
"""

__version__ = "1.0.0"
