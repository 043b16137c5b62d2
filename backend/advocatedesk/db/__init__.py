"""
Database Module

Contains SQLAlchemy models, Pydantic schemas, and database configuration.
"""

from advocatedesk.db.database import Base, engine, SessionLocal, get_db
from advocatedesk.db import models, schemas

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'get_db',
    'models',
    'schemas'
]
