# backend/app/db/__init__.py

"""
Database Module

Contains domain enums, Pydantic schemas, and the blob-store tables.
"""

from app.db.database import Base, make_engine, make_session_factory
from app.db import models, schemas

__all__ = [
    'Base',
    'make_engine',
    'make_session_factory',
    'models',
    'schemas'
]
