"""
Record store over the DuckDB tables of the familyalbum application.

``RecordStore`` is a small table-generic CRUD layer: ``list``, ``get_by_id``,
``insert`` and ``update``. Table and column names are checked against the
schema before being placed in SQL; every value is a bound parameter.
"""

import time
from typing import Any

import duckdb

from ..error_handling import DatabaseError, NotFoundError, ValidationError
from ..logging_config import get_logger, log_error, log_performance
from ..models.database import DatabaseManager, get_database_manager
from ..models.schema import TABLE_COLUMNS

logger = get_logger(__name__)


class RecordStore:
    """
    Table-generic access to the photo and comment records.

    All methods return plain dictionaries keyed by column name; mapping to
    ``Photo`` / ``Comment`` happens in the services that own those models.
    """

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize the record store.

        Args:
            db_manager: Manager of an initialized DuckDB database
        """
        self.db_manager = db_manager

    def _columns(self, table: str) -> tuple[str, ...]:
        try:
            return TABLE_COLUMNS[table]
        except KeyError:
            raise ValidationError(f"Unknown table: {table}", code="unknown_table", details={"table": table}) from None

    def _check_columns(self, table: str, names: list[str] | tuple[str, ...]) -> None:
        known = self._columns(table)
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ValidationError(
                f"Unknown columns for {table}: {', '.join(unknown)}",
                code="unknown_column",
                details={"table": table, "columns": unknown},
            )

    def list(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: tuple[str, bool] | None = None,
        limit: int | None = None,
        columns: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        List records of a table.

        Args:
            table: "photos" or "comments"
            filters: Column equality filters, combined with AND
            order: (column, ascending) pair
            limit: Maximum number of records
            columns: Subset of columns to return (defaults to all)

        Returns:
            List of records as dictionaries

        Raises:
            ValidationError: If a table or column name is unknown
            DatabaseError: If the query fails
        """
        selected = tuple(columns) if columns else self._columns(table)
        self._check_columns(table, selected)

        sql = f"SELECT {', '.join(selected)} FROM {table}"  # nosec B608
        parameters: list[Any] = []

        if filters:
            self._check_columns(table, list(filters))
            sql += " WHERE " + " AND ".join(f"{column} = ?" for column in filters)
            parameters.extend(filters.values())

        if order:
            column, ascending = order
            self._check_columns(table, [column])
            sql += f" ORDER BY {column} {'ASC' if ascending else 'DESC'}"

        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        start = time.perf_counter()
        try:
            records = self.db_manager.fetch_dicts(sql, parameters)
        except duckdb.Error as e:
            log_error(e, {"operation": "list_records", "table": table})
            raise DatabaseError(f"Failed to list {table}: {e}", original_exception=e) from e

        log_performance("list_records", time.perf_counter() - start, table=table, count=len(records))
        return records

    def get_by_id(self, table: str, record_id: str) -> dict[str, Any]:
        """
        Get a single record by primary key.

        Raises:
            NotFoundError: If no record has that ID
            DatabaseError: If the query fails
        """
        records = self.list(table, filters={"id": record_id}, limit=1)
        if not records:
            raise NotFoundError(
                f"{table} record {record_id} not found",
                code=f"{table}_not_found",
                details={"table": table, "record_id": record_id},
            )
        return records[0]

    def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a record and return it as stored.

        Raises:
            ValidationError: If the record has unknown columns or no ID
            DatabaseError: If the insert fails
        """
        if not record.get("id"):
            raise ValidationError(f"{table} record requires an id", code="missing_id", details={"table": table})
        self._check_columns(table, list(record))

        columns = list(record)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"  # nosec B608

        try:
            self.db_manager.execute_query(sql, [record[column] for column in columns])
        except duckdb.Error as e:
            log_error(e, {"operation": "insert_record", "table": table, "record_id": record.get("id")})
            raise DatabaseError(f"Failed to insert into {table}: {e}", original_exception=e) from e

        logger.info("record_inserted", table=table, record_id=record["id"])
        return self.get_by_id(table, record["id"])

    def update(self, table: str, record_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update to a record and return the updated record.

        Raises:
            ValidationError: If the patch is empty, touches the ID or unknown columns
            NotFoundError: If no record has that ID
            DatabaseError: If the update fails
        """
        if not patch:
            raise ValidationError("Empty update", code="empty_patch", details={"table": table})
        if "id" in patch:
            raise ValidationError("Record IDs are immutable", code="immutable_id", details={"table": table})
        self._check_columns(table, list(patch))

        self.get_by_id(table, record_id)

        assignments = ", ".join(f"{column} = ?" for column in patch)
        sql = f"UPDATE {table} SET {assignments} WHERE id = ?"  # nosec B608

        try:
            self.db_manager.execute_query(sql, [*patch.values(), record_id])
        except duckdb.Error as e:
            log_error(e, {"operation": "update_record", "table": table, "record_id": record_id})
            raise DatabaseError(f"Failed to update {table} {record_id}: {e}", original_exception=e) from e

        logger.info("record_updated", table=table, record_id=record_id, columns=list(patch))
        return self.get_by_id(table, record_id)


_record_store: RecordStore | None = None


def get_record_store(db_path: str | None = None) -> RecordStore:
    """
    Get the global record store, opening the configured database on first use.

    Args:
        db_path: Database file (defaults to the DATABASE_PATH setting)

    Raises:
        DatabaseError: If the database cannot be opened
    """
    global _record_store

    if _record_store is None:
        from ..config import get_database_path

        path = db_path or get_database_path()
        try:
            _record_store = RecordStore(get_database_manager(path))
        except (RuntimeError, duckdb.Error) as e:
            raise DatabaseError(f"Failed to open database {path}: {e}", original_exception=e) from e

    return _record_store


def reset_record_store() -> None:
    """Close and forget the global record store."""
    global _record_store
    if _record_store is not None:
        _record_store.db_manager.close()
        _record_store = None
