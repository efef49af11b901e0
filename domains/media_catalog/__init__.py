"""
Media Catalog Domain

Tracks the user's personal media library for the lifetime of the process:
- classifier.py - Accept/reject candidates and assign a category
- pipeline.py - Staging sessions with simulated transfer progress
- catalog.py - Authoritative store of ready media entries
- query.py - Search, type filter and dashboard aggregates
- blobs.py - In-memory content store handing out blob references
- inbox.py - Watched folder feeding candidates into the pipeline
- transport.py - Transfer contract and the simulated local transport

library.py wires all of the above behind a single MediaLibrary object.
"""

__all__ = [
    "blobs",
    "catalog",
    "classifier",
    "errors",
    "inbox",
    "library",
    "models",
    "pipeline",
    "query",
    "transport",
]
