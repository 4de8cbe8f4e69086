"""
Database driver for the CES gateway.
Provides connection pooling and dashboard persistence.
"""
from typing import Optional, List
from contextlib import contextmanager
import json
import os
import psycopg2.errors
from psycopg2.pool import ThreadedConnectionPool
from psycopg2.extras import RealDictCursor

from ..exceptions import DashboardConflict
from ..models.dashboard import Dashboard
from ..monitoring import DB_CONNECTION_POOL

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'schema.sql')


class DashboardDB:
    """Database driver for dashboard storage with connection pooling."""

    def __init__(
        self,
        db_host: str = 'localhost',
        db_name: str = 'dashboards',
        db_user: str = 'dashboards',
        db_password: Optional[str] = None,
        db_port: int = 5432,
        dsn: Optional[str] = None,
        min_conn: int = 2,
        max_conn: int = 10
    ):
        """
        Initialize database connection pool.

        Args:
            db_host: PostgreSQL host
            db_name: Database name
            db_user: Database user
            db_password: Database password
            db_port: PostgreSQL port (default: 5432)
            dsn: Optional libpq connection string; overrides the other connection arguments
            min_conn: Minimum number of connections in pool
            max_conn: Maximum number of connections in pool
        """
        if dsn:
            self.pool = ThreadedConnectionPool(min_conn, max_conn, dsn=dsn)
        else:
            self.pool = ThreadedConnectionPool(
                min_conn,
                max_conn,
                host=db_host,
                port=db_port,
                database=db_name,
                user=db_user,
                password=db_password
            )
        self._active_connections = 0
        self._max_conn = max_conn

        # Initialize pool metrics
        DB_CONNECTION_POOL.labels(state='active').set(0)
        DB_CONNECTION_POOL.labels(state='idle').set(min_conn)
        DB_CONNECTION_POOL.labels(state='max').set(max_conn)

    @contextmanager
    def _get_connection(self):
        """Context manager for getting a connection from the pool."""
        conn = self.pool.getconn()
        self._active_connections += 1
        DB_CONNECTION_POOL.labels(state='active').set(self._active_connections)
        DB_CONNECTION_POOL.labels(state='idle').set(self._max_conn - self._active_connections)
        try:
            yield conn
        finally:
            self.pool.putconn(conn)
            self._active_connections -= 1
            DB_CONNECTION_POOL.labels(state='active').set(self._active_connections)
            DB_CONNECTION_POOL.labels(state='idle').set(self._max_conn - self._active_connections)

    @contextmanager
    def get_cursor(self, commit: bool = True, cursor_factory=None):
        """
        Context manager for database cursors with automatic commit/rollback.

        Args:
            commit: Whether to commit on success
            cursor_factory: Optional cursor factory (e.g., RealDictCursor)

        Yields:
            Database cursor
        """
        with self._get_connection() as conn:
            cursor = conn.cursor(cursor_factory=cursor_factory)
            try:
                yield cursor
                if commit:
                    conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def migrate(self) -> None:
        """Apply schema.sql. Every statement in it is idempotent."""
        with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        with self.get_cursor() as cursor:
            cursor.execute(schema_sql)

    def load_dashboards(self, user_id: str) -> List[Dashboard]:
        """
        Load all dashboards owned by a user.

        Args:
            user_id: Owner's user ID

        Returns:
            List of Dashboard objects ordered by ID
        """
        with self.get_cursor(commit=False, cursor_factory=RealDictCursor) as cursor:
            cursor.execute(
                "SELECT id, user_id, name, graphs FROM dashboard WHERE user_id = %s ORDER BY id",
                (user_id,)
            )
            results = cursor.fetchall()
            return [Dashboard.from_dict(dict(row)) for row in results]

    def load_all_dashboards(self) -> List[Dashboard]:
        """
        Load every dashboard from the database.

        Returns:
            List of all Dashboard objects
        """
        with self.get_cursor(commit=False, cursor_factory=RealDictCursor) as cursor:
            cursor.execute("SELECT id, user_id, name, graphs FROM dashboard ORDER BY user_id, id")
            results = cursor.fetchall()
            return [Dashboard.from_dict(dict(row)) for row in results]

    def load_dashboard(self, user_id: str, dashboard_id: int) -> Optional[Dashboard]:
        """
        Load a single dashboard owned by a user.

        Args:
            user_id: Owner's user ID
            dashboard_id: Dashboard ID

        Returns:
            Dashboard object if found, None otherwise
        """
        with self.get_cursor(commit=False, cursor_factory=RealDictCursor) as cursor:
            cursor.execute(
                "SELECT id, user_id, name, graphs FROM dashboard WHERE id = %s AND user_id = %s",
                (dashboard_id, user_id)
            )
            result = cursor.fetchone()
            if not result:
                return None
            return Dashboard.from_dict(dict(result))

    def create_dashboard(self, user_id: str, dashboard: Dashboard) -> int:
        """
        Insert a new dashboard for a user.

        Args:
            user_id: Owner's user ID
            dashboard: Dashboard to insert (its id is ignored)

        Returns:
            The database-generated dashboard ID

        Raises:
            DashboardConflict: If the user already has a dashboard with this name
        """
        try:
            with self.get_cursor() as cursor:
                cursor.execute(
                    """
                    INSERT INTO dashboard (user_id, name, graphs)
                    VALUES (%s, %s, %s::jsonb)
                    RETURNING id
                    """,
                    (user_id, dashboard.name, json.dumps(dashboard.graphs))
                )
                dashboard_id = cursor.fetchone()[0]
        except psycopg2.errors.UniqueViolation as e:
            raise DashboardConflict(f"dashboard '{dashboard.name}' already exists") from e

        dashboard.id = dashboard_id
        dashboard.user_id = user_id
        return dashboard_id

    def update_dashboard(self, user_id: str, dashboard: Dashboard) -> bool:
        """
        Update name and graphs of a dashboard owned by a user.

        Args:
            user_id: Owner's user ID
            dashboard: Dashboard carrying the ID to update and the new values

        Returns:
            True if a row was updated, False if no such dashboard exists for the user

        Raises:
            DashboardConflict: If the new name clashes with another of the user's dashboards
        """
        try:
            with self.get_cursor() as cursor:
                cursor.execute(
                    """
                    UPDATE dashboard SET name = %s, graphs = %s::jsonb
                    WHERE id = %s AND user_id = %s
                    """,
                    (dashboard.name, json.dumps(dashboard.graphs), dashboard.id, user_id)
                )
                return cursor.rowcount > 0
        except psycopg2.errors.UniqueViolation as e:
            raise DashboardConflict(f"dashboard '{dashboard.name}' already exists") from e

    def delete_dashboard(self, user_id: str, dashboard_id: int) -> bool:
        """
        Delete a dashboard owned by a user.

        Args:
            user_id: Owner's user ID
            dashboard_id: Dashboard ID

        Returns:
            True if a row was deleted, False otherwise
        """
        with self.get_cursor() as cursor:
            cursor.execute(
                "DELETE FROM dashboard WHERE id = %s AND user_id = %s",
                (dashboard_id, user_id)
            )
            return cursor.rowcount > 0

    def close(self) -> None:
        """Close all connections in the pool."""
        if self.pool and not self.pool.closed:
            self.pool.closeall()

    def __del__(self):
        """Cleanup connection pool on deletion."""
        if hasattr(self, 'pool'):
            self.close()
