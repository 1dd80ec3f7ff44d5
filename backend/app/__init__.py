"""
Tree Leaves Backend — Application Package Initializer
=====================================================

What:  Marks the `app` directory as a Python package.
Who:   Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend keeps the same layering for every request:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     LeafService (Business Logic)    │  ← Index assignment, stats
    ├─────────────────────────────────────┤
    │          Schemas (Data)             │  ← Pydantic records + envelopes
    ├─────────────────────────────────────┤
    │     LeafStore (Persistence)         │  ← JSON file or in-memory list
    └─────────────────────────────────────┘

    Routes handle status codes and envelopes; LeafService owns the
    read-modify-write rules; LeafStore only knows how to read and replace
    the whole collection.
"""

__version__ = "1.0.0"
