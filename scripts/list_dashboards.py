#!/usr/bin/env python
"""
Script to list stored dashboards.

Usage:
  python scripts/list_dashboards.py
  python scripts/list_dashboards.py --user-id <identity service user ID>
"""
import json
import argparse

from dotenv import load_dotenv

from ces_gateway.utils import get_db_connection


def main():
    """Main function to list dashboards."""
    load_dotenv()

    parser = argparse.ArgumentParser(description='List stored dashboards')
    parser.add_argument('--user-id', help='Only list dashboards of this user')
    parser.add_argument('--graphs', action='store_true', help='Print the graphs document as well')
    args = parser.parse_args()

    print("=" * 80)
    print(f"Dashboards of user {args.user_id}" if args.user_id else "All Dashboards")
    print("=" * 80)
    print()

    # Connect to database
    db = get_db_connection()

    if args.user_id:
        dashboards = db.load_dashboards(args.user_id)
    else:
        dashboards = db.load_all_dashboards()

    if not dashboards:
        print("No dashboards found in the database.")
        db.close()
        return

    print(f"Found {len(dashboards)} dashboard(s):\n")

    for i, dashboard in enumerate(dashboards, 1):
        print(f"{i}. Dashboard ID: {dashboard.id}")
        print(f"   Name:     {dashboard.name}")
        print(f"   User:     {dashboard.user_id}")
        if args.graphs:
            print(f"   Graphs:   {json.dumps(dashboard.graphs, indent=2, ensure_ascii=False)}")
        print()

    db.close()


if __name__ == "__main__":
    main()
