# Services package init
"""
Tree Leaves Backend — Services Layer
=====================================

What:  Business logic and persistence sitting behind the routes.

Service Inventory:
    - LeafStore (abstract): read/replace the whole leaf collection
    - FileLeafStore:        JSON document on disk
    - MemoryLeafStore:      in-process list for ephemeral hosts
    - LeafService:          index assignment, duplicate check, clear, stats

The store and the service are constructed by create_app() and reached through FastAPI
dependencies (app/dependencies.py), never through module globals.
"""
