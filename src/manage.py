"""Farm marketplace database management CLI.

Creates or drops the tables of the configured SQL database. Only meaningful
when the active environment uses a SQL provider, e.g.:

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def _initialized_domain():
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


def setup_database():
    from marketplace.utils.db import setup_db

    print("Initializing marketplace domain...")
    domain = _initialized_domain()
    print("Creating database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from marketplace.utils.db import drop_db

    print("Initializing marketplace domain...")
    domain = _initialized_domain()
    print("Dropping database schema...")
    drop_db(domain)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Farm marketplace database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
