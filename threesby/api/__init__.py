"""API Layer — FastAPI routers, dependencies and global error handlers.

Invariants:
    - Routes never contain business logic (delegate to services/)
    - Domain errors propagate to error_handlers.py; routes do not catch them
"""
