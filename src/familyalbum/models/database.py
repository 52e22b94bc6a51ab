"""
Database initialization and connection management for the familyalbum application.

One DuckDB connection is opened per database file; every query runs on its
own cursor so that view loaders may query from worker threads.
"""

import threading
from pathlib import Path
from typing import Any

import duckdb

from ..logging_config import get_logger
from .schema import TABLE_COLUMNS, get_schema_statements, validate_schema_compatibility

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages a DuckDB database connection and its schema.
    """

    def __init__(self, db_path: str):
        """
        Initialize DatabaseManager.

        Args:
            db_path: Path to the DuckDB database file (or ":memory:")
        """
        self.db_path = db_path
        self._connection: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.Lock()

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Get or create the database connection.

        Returns:
            DuckDB connection object
        """
        with self._lock:
            if self._connection is None:
                self._connection = duckdb.connect(self.db_path)
                logger.info("database_connected", db_path=self.db_path)

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.info("database_closed", db_path=self.db_path)

    def initialize_schema(self) -> None:
        """
        Create all tables and indexes if they don't exist.

        Raises:
            RuntimeError: If the schema does not match the models
            duckdb.Error: If database operations fail
        """
        if not validate_schema_compatibility():
            raise RuntimeError("Schema is not compatible with the Photo and Comment models")

        cursor = self.connect().cursor()
        try:
            for statement in get_schema_statements():
                logger.debug("executing_schema_statement", statement=statement.strip().splitlines()[0])
                cursor.execute(statement)
            logger.info("database_schema_initialized", db_path=self.db_path)
        except duckdb.Error as e:
            logger.error("database_schema_initialization_failed", db_path=self.db_path, error=str(e))
            raise
        finally:
            cursor.close()

    def verify_schema(self) -> bool:
        """
        Verify that every table and column the models need exists.

        Returns:
            True if schema is valid, False otherwise
        """
        try:
            for table, required_columns in TABLE_COLUMNS.items():
                rows = self.execute_query(f"PRAGMA table_info('{table}')")
                column_names = {row[1] for row in rows}

                if not column_names:
                    logger.warning("table_missing", table=table)
                    return False

                missing_columns = set(required_columns) - column_names
                if missing_columns:
                    logger.warning("columns_missing", table=table, columns=sorted(missing_columns))
                    return False

            logger.debug("database_schema_verified", db_path=self.db_path)
            return True

        except duckdb.Error as e:
            logger.error("schema_verification_failed", error=str(e))
            return False

    def execute_query(self, query: str, parameters: list | tuple | None = None) -> list[tuple]:
        """
        Execute a SQL query and return results.

        Args:
            query: SQL query string
            parameters: Optional positional query parameters

        Returns:
            List of result tuples (DuckDB returns a single row count for DML)

        Raises:
            duckdb.Error: If query execution fails
        """
        cursor = self.connect().cursor()
        try:
            if parameters:
                cursor.execute(query, parameters)
            else:
                cursor.execute(query)

            if cursor.description is None:
                return []
            return cursor.fetchall()

        except duckdb.Error as e:
            logger.error("query_failed", query=query, error=str(e))
            raise
        finally:
            cursor.close()

    def fetch_dicts(self, query: str, parameters: list | tuple | None = None) -> list[dict[str, Any]]:
        """
        Execute a SQL query and return each row as a column-name keyed dictionary.

        Raises:
            duckdb.Error: If query execution fails
        """
        cursor = self.connect().cursor()
        try:
            if parameters:
                cursor.execute(query, parameters)
            else:
                cursor.execute(query)

            if cursor.description is None:
                return []
            columns = [description[0] for description in cursor.description]
            return [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]

        except duckdb.Error as e:
            logger.error("query_failed", query=query, error=str(e))
            raise
        finally:
            cursor.close()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def create_database(db_path: str) -> DatabaseManager:
    """
    Create and initialize a new DuckDB database.

    Args:
        db_path: Path where the database file should be created

    Returns:
        Initialized DatabaseManager instance

    Raises:
        RuntimeError: If database creation fails
    """
    try:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        db_manager = DatabaseManager(db_path)
        db_manager.initialize_schema()

        if not db_manager.verify_schema():
            raise RuntimeError("Schema verification failed after creation")

        logger.info("database_created", db_path=db_path)
        return db_manager

    except Exception as e:
        logger.error("database_creation_failed", db_path=db_path, error=str(e))
        raise RuntimeError(f"Database creation failed: {e}") from e


def get_database_manager(db_path: str, create_if_missing: bool = True) -> DatabaseManager:
    """
    Get a DatabaseManager, creating the database file if it doesn't exist.

    Args:
        db_path: Path to the database file
        create_if_missing: Whether to create the database if it doesn't exist

    Returns:
        DatabaseManager instance with a verified schema

    Raises:
        FileNotFoundError: If database doesn't exist and create_if_missing is False
        RuntimeError: If database operations fail
    """
    if db_path == ":memory:" or not Path(db_path).exists():
        if create_if_missing:
            return create_database(db_path)
        raise FileNotFoundError(f"Database file not found: {db_path}")

    db_manager = DatabaseManager(db_path)

    if not db_manager.verify_schema():
        logger.warning("schema_verification_failed_reinitializing", db_path=db_path)
        db_manager.initialize_schema()

    return db_manager
