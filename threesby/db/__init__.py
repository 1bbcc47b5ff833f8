"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - All ORM models inherit from db.base.Base
    - All sessions are async (AsyncSession), created by infrastructure/database.py
"""
