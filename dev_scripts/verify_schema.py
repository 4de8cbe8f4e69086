#!/usr/bin/env python3
"""
Quick script to verify the dashboard schema.
"""
from ces_gateway.utils import get_db_connection

db = get_db_connection(verbose=False)

with db.get_cursor(commit=False) as cursor:
    cursor.execute("""
        SELECT tablename
        FROM pg_tables
        WHERE schemaname = 'public'
        ORDER BY tablename
    """)
    print("Tables in database:")
    for table in cursor.fetchall():
        print(f"  - {table[0]}")

    cursor.execute("""
        SELECT column_name, data_type, is_nullable
        FROM information_schema.columns
        WHERE table_name = 'dashboard'
        ORDER BY ordinal_position
    """)
    print("\nDashboard table columns:")
    for col in cursor.fetchall():
        nullable = "NULL" if col[2] == 'YES' else "NOT NULL"
        print(f"  - {col[0]} ({col[1]}) {nullable}")

    cursor.execute("""
        SELECT conname, pg_get_constraintdef(oid)
        FROM pg_constraint
        WHERE conrelid = 'dashboard'::regclass
        ORDER BY conname
    """)
    print("\nDashboard table constraints:")
    for name, definition in cursor.fetchall():
        print(f"  - {name}: {definition}")

db.close()
print("\n✓ Schema verification complete")
