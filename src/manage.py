"""ElectroStore management CLI.

Usage:
    python src/manage.py setup-db     # Create all tables
    python src/manage.py drop-db      # Drop all tables
    python src/manage.py seed-admin   # Create the main admin if missing
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def seed_admin():
    from storefront.identity.registration import seed_main_admin

    domain = _domain()
    with domain.domain_context():
        admin_id = seed_main_admin()
    print(f"Main admin ready: {admin_id}")


def main():
    parser = argparse.ArgumentParser(description="ElectroStore database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-admin", help="Create the main admin account from MAIN_ADMIN_* settings")

    args = parser.parse_args()

    commands = {
        "setup-db": setup_database,
        "drop-db": drop_database,
        "seed-admin": seed_admin,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)
    command()


if __name__ == "__main__":
    main()
