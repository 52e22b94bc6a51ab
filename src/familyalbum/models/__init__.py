"""
Models module for the familyalbum application.

This module contains data models and schemas:
- Photo: a shared family photo
- Comment: a comment on a photo
- DatabaseManager: DuckDB connection and schema management
"""

from .comment import Comment
from .database import DatabaseManager, create_database, get_database_manager
from .photo import Photo
from .schema import get_schema_statements, get_table_columns, validate_schema_compatibility

__all__ = [
    "Photo",
    "Comment",
    "DatabaseManager",
    "create_database",
    "get_database_manager",
    "get_schema_statements",
    "get_table_columns",
    "validate_schema_compatibility",
]
