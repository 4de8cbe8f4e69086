#!/usr/bin/env python
"""
Database setup script for the CES gateway.
Creates the dashboards database and user with proper permissions, then applies ces_gateway/database/schema.sql

Usage:
  python setup_database.py                 # Sets up main 'dashboards' database
  python setup_database.py --test-db       # Sets up test 'dashboards_test' database
"""

import os
import sys
import argparse
import psycopg2
from psycopg2 import sql
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from dotenv import load_dotenv


def main():
    """Setup dashboards database and user"""
    # Load environment variables from .env file
    load_dotenv()

    parser = argparse.ArgumentParser(description='Setup CES gateway database')
    parser.add_argument('--test-db', action='store_true',
                       help='Create dashboards_test database instead of the main database')
    args = parser.parse_args()

    pg_host = os.environ.get('POSTGRES_HOST', 'localhost')
    pg_port = os.environ.get('POSTGRES_PORT', '5432')
    pg_user = os.environ.get('POSTGRES_USER', 'postgres')
    pg_password = os.environ.get('PG_PASSWORD', None)

    if args.test_db:
        dashboards_db = 'dashboards_test'
        print("Setting up TEST database 'dashboards_test'...")
    else:
        dashboards_db = os.environ.get('DASHBOARDS_PG_DB', 'dashboards')
    dashboards_user = os.environ.get('DASHBOARDS_PG_USER', 'dashboards')
    dashboards_password = os.environ.get('DASHBOARDS_PG_PASSWORD', None)

    if pg_password is None:
        print("Error: PG_PASSWORD environment variable is required")
        sys.exit(1)
    if dashboards_password is None:
        print("Error: DASHBOARDS_PG_PASSWORD environment variable is required")
        sys.exit(1)

    print(f"Setting up database '{dashboards_db}' and user '{dashboards_user}'...")
    print(f"Connecting to PostgreSQL at {pg_host}:{pg_port} as {pg_user}")

    try:
        conn = psycopg2.connect(
            host=pg_host,
            port=pg_port,
            database='postgres',
            user=pg_user,
            password=pg_password
        )
        conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)

        with conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM pg_roles WHERE rolname = %s", (dashboards_user,))
            if not cursor.fetchone():
                print(f"Creating user '{dashboards_user}'...")
                cursor.execute(
                    sql.SQL("CREATE USER {} WITH PASSWORD %s").format(sql.Identifier(dashboards_user)),
                    (dashboards_password,)
                )
                print(f"✓ User '{dashboards_user}' created")
            else:
                print(f"✓ User '{dashboards_user}' already exists")

            cursor.execute("SELECT 1 FROM pg_database WHERE datname = %s", (dashboards_db,))
            if not cursor.fetchone():
                print(f"Creating database '{dashboards_db}'...")
                cursor.execute(sql.SQL("CREATE DATABASE {} OWNER {}").format(
                    sql.Identifier(dashboards_db), sql.Identifier(dashboards_user)))
                print(f"✓ Database '{dashboards_db}' created")
            else:
                print(f"✓ Database '{dashboards_db}' already exists")

            print("Setting permissions...")
            cursor.execute(sql.SQL("GRANT ALL PRIVILEGES ON DATABASE {} TO {}").format(
                sql.Identifier(dashboards_db), sql.Identifier(dashboards_user)))
            print(f"✓ Granted all privileges on database '{dashboards_db}' to user '{dashboards_user}'")

        conn.close()

        print(f"\nConnecting as '{dashboards_user}' to apply schema...")
        dashboards_conn = psycopg2.connect(
            host=pg_host,
            port=pg_port,
            database=dashboards_db,
            user=dashboards_user,
            password=dashboards_password
        )
        dashboards_conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)

        repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        schema_path = os.path.join(repo_root, 'ces_gateway', 'database', 'schema.sql')
        if not os.path.exists(schema_path):
            print(f"Error: schema file not found at {schema_path}")
            sys.exit(1)

        with open(schema_path, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        with dashboards_conn.cursor() as cursor:
            print(f"Applying schema from {schema_path}...")
            cursor.execute(schema_sql)
            print("✓ Schema applied")

        dashboards_conn.close()
        print("✓ Database setup complete")
        print(f"Database: {dashboards_db}")
        print(f"User: {dashboards_user}")
        print(f"Host: {pg_host}:{pg_port}")

    except psycopg2.Error as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
