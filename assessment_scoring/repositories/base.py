"""
Base Repository - Assessment Scoring Engine
assessment_scoring/repositories/base.py

Base repository class with Snowflake connection management and common utilities.
"""

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional, Sequence

import snowflake.connector
from snowflake.connector import DictCursor
from snowflake.connector.errors import DatabaseError, InterfaceError, ProgrammingError

from assessment_scoring.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    RepositoryException,
)
from assessment_scoring.services.snowflake import get_snowflake_connection


class BaseRepository:
    """Base repository with Snowflake connection management."""

    @contextmanager
    def get_connection(self) -> Generator[snowflake.connector.SnowflakeConnection, None, None]:
        """Context manager for Snowflake connections."""
        conn = None
        try:
            conn = get_snowflake_connection()
            yield conn
        except InterfaceError as e:
            raise DatabaseConnectionException(f"Failed to connect to Snowflake: {e}")
        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_cursor(self, dict_cursor: bool = True) -> Generator[Any, None, None]:
        """Context manager for Snowflake cursors with automatic connection cleanup."""
        with self.get_connection() as conn:
            cursor = conn.cursor(DictCursor) if dict_cursor else conn.cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    @contextmanager
    def transaction(self) -> Generator[Any, None, None]:
        """
        Run several statements as one unit.

        Commits when the block exits normally and rolls back on any error,
        so either every statement is applied or none is.
        """
        with self.get_cursor() as cursor:
            conn = cursor.connection
            cursor.execute("BEGIN")
            try:
                yield cursor
                conn.commit()
            except ProgrammingError as e:
                conn.rollback()
                raise self._translate_error(e)
            except DatabaseError as e:
                conn.rollback()
                raise RepositoryException(f"Database error: {e}")
            except Exception:
                conn.rollback()
                raise

    def execute_query(
        self,
        sql: str,
        params: Optional[tuple] = None,
        fetch_one: bool = False,
        fetch_all: bool = False,
        commit: bool = False,
    ) -> Optional[Any]:
        """
        Execute a SQL query with error handling.

        Args:
            sql: SQL query string
            params: Query parameters
            fetch_one: Return single row
            fetch_all: Return all rows
            commit: Commit transaction after execution

        Returns:
            Query results or None
        """
        with self.get_cursor() as cursor:
            try:
                cursor.execute(sql, params or ())

                if commit:
                    cursor.connection.commit()

                if fetch_one:
                    return cursor.fetchone()
                elif fetch_all:
                    return cursor.fetchall()

                return cursor.rowcount

            except ProgrammingError as e:
                raise self._translate_error(e)
            except DatabaseError as e:
                raise RepositoryException(f"Database error: {e}")

    def _translate_error(self, e: ProgrammingError) -> RepositoryException:
        error_msg = str(e).upper()
        if "UNIQUE" in error_msg or "DUPLICATE" in error_msg:
            return DuplicateEntityException(str(e))
        return RepositoryException(f"Query error: {e}")

    def placeholders(self, values: Sequence[Any]) -> str:
        """Build '%s, %s, ...' for an IN clause."""
        return ", ".join(["%s"] * len(values))

    def normalize_timestamp(self, dt: Optional[datetime]) -> Optional[datetime]:
        """Ensure timestamp is UTC-aware."""
        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    def row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row (uppercase keys) to lowercase dict."""
        if row is None:
            return {}
        return {k.lower(): v for k, v in row.items()}

    def parse_variant(self, value: Any, default: Any = None) -> Any:
        """Decode a VARIANT / ARRAY / OBJECT column, returned as JSON text by the connector."""
        if value is None:
            return default
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return default
        return value

    def rows_to_dicts(self, rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        return [self.row_to_dict(r) for r in rows or []]
