"""
Recommendation engine.

Responsibilities:
- Extract search filters from free text and merge them across turns.
- Query the catalog for matching available vehicles.
- Score and rank candidates using deterministic heuristics.
- Return structured recommendations ready for API serialisation.
"""
