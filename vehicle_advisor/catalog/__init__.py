"""
Vehicle catalog.

Responsibilities:
- Load the vehicle inventory into memory.
- Answer availability, id and free-text lookups for the chat engine.
- Convert inventory rows into API-ready ``Vehicle`` models.
"""
