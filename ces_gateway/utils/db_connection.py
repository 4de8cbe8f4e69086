"""
Database connection utilities for the application and scripts.
"""
import os
import sys
from dotenv import load_dotenv

from ces_gateway.database import DashboardDB

# Load environment variables from .env file
load_dotenv()


def get_db_connection(verbose: bool = True) -> DashboardDB:
    """
    Create and return a database connection using environment variables.

    Environment variables:
        PG_URI: Full libpq connection string (overrides everything below)
        POSTGRES_HOST: Database host (default: localhost)
        POSTGRES_PORT: Database port (default: 5432)
        DASHBOARDS_PG_DB: Database name (default: dashboards)
        DASHBOARDS_PG_USER: Database user (default: dashboards)
        DASHBOARDS_PG_PASSWORD: Database password (required without PG_URI)

    Args:
        verbose: Whether to print connection status messages

    Returns:
        DashboardDB instance

    Raises:
        SystemExit: If required environment variables are missing or connection fails
    """
    dsn = os.environ.get('PG_URI')
    db_host = os.environ.get('POSTGRES_HOST', 'localhost')
    db_port = int(os.environ.get('POSTGRES_PORT', '5432'))
    db_name = os.environ.get('DASHBOARDS_PG_DB', 'dashboards')
    db_user = os.environ.get('DASHBOARDS_PG_USER', 'dashboards')
    db_password = os.environ.get('DASHBOARDS_PG_PASSWORD')

    if not dsn and not db_password:
        print("Error: PG_URI or DASHBOARDS_PG_PASSWORD environment variable is required")
        sys.exit(1)

    if verbose:
        target = 'PG_URI' if dsn else f"'{db_name}' at {db_host}:{db_port}"
        print(f"Connecting to database {target}...")

    try:
        db = DashboardDB(
            db_host=db_host,
            db_port=db_port,
            db_name=db_name,
            db_user=db_user,
            db_password=db_password,
            dsn=dsn
        )
        if verbose:
            print("✓ Connected\n")
        return db
    except Exception as e:
        print(f"Error connecting to database: {e}")
        sys.exit(1)
