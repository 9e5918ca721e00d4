"""
MySQL connection management for SQL Ops.

Used only for catalog lookups (table listing, database existence); dumps and
queries run through the command-line client.
"""

import logging
from typing import Optional

import mysql.connector
from mysql.connector import Error as MySQLError

from .errors import CatalogUnavailable
from .models import ConnectionSpec


class DatabaseConnection:
    """Manages MySQL database connections with context manager support."""

    DEFAULT_PORT = 3306
    DEFAULT_CHARSET = 'utf8mb4'

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: Optional[str],
        database: Optional[str] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    @classmethod
    def from_spec(cls, spec: ConnectionSpec, use_database: bool = True) -> "DatabaseConnection":
        return cls(
            host=spec.host or 'localhost',
            port=spec.port or cls.DEFAULT_PORT,
            user=spec.username,
            password=spec.password,
            database=(spec.database or None) if use_database else None
        )

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection."""
        params = dict(
            host=self.host,
            port=self.port,
            user=self.user,
            database=self.database,
            charset=self.DEFAULT_CHARSET,
            use_unicode=True
        )
        # Leave the password out entirely so the client option files apply.
        if self.password is not None:
            params['password'] = self.password
        try:
            self.connection = mysql.connector.connect(**params)
            logging.info(f"Connected to {self.host}:{self.port}/{self.database or 'N/A'}")
        except MySQLError as e:
            logging.error(f"Failed to connect to database: {e}")
            raise

    def disconnect(self) -> None:
        """Close database connection."""
        if self.connection and self.connection.is_connected():
            self.connection.close()
            logging.debug("Database connection closed")

    def execute_query(self, query: str, params: Optional[tuple] = None) -> list[tuple]:
        """Execute a query and return results."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the current database."""
        results = self.execute_query("SHOW TABLES")
        return [row[0] for row in results]

    def database_exists(self, name: str) -> bool:
        """Check whether a schema with this name exists on the server."""
        results = self.execute_query(
            "SELECT 1 FROM information_schema.SCHEMATA WHERE SCHEMA_NAME = %s",
            (name,)
        )
        return bool(results)


class MySQLCatalog:
    """Live table catalog backed by a MySQL connection."""

    def __init__(self, spec: ConnectionSpec):
        self.spec = spec

    def list_tables(self) -> list[str]:
        try:
            with DatabaseConnection.from_spec(self.spec) as conn:
                return conn.get_tables()
        except MySQLError as e:
            raise CatalogUnavailable(
                f"Could not list tables of '{self.spec.database}': {e}"
            ) from e

    def database_exists(self) -> bool:
        if not self.spec.database:
            return False
        try:
            with DatabaseConnection.from_spec(self.spec, use_database=False) as conn:
                return conn.database_exists(self.spec.database)
        except MySQLError as e:
            raise CatalogUnavailable(
                f"Could not check whether '{self.spec.database}' exists: {e}"
            ) from e
