"""API Layer - FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Errors return structured JSON; processOrder 404 carries no body

Design Decisions:
    - Thin routes delegate to services
"""
