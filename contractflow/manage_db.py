"""
Database maintenance commands: check, init, reset, purge-orphans
"""
import argparse
import sys

from sqlalchemy import inspect

from contractflow.core import database
from contractflow.core.logging_config import configure_logging
from contractflow.services.blueprint_service import BlueprintService


def check_schema() -> int:
    if not database.test_connection():
        print("Database is not reachable", file=sys.stderr)
        return 1

    inspector = inspect(database.engine)
    for table_name in sorted(database.Base.metadata.tables):
        if not inspector.has_table(table_name):
            print(f"  {table_name:30s} MISSING")
            continue
        print(f"  {table_name}")
        for column in inspector.get_columns(table_name):
            nullable = "NULL" if column["nullable"] else "NOT NULL"
            print(f"    {column['name']:28s} {str(column['type']):20s} {nullable}")
    return 0


def purge_orphans(contract_id=None) -> int:
    with database.get_db_session() as session:
        removed = BlueprintService(session).purge_orphaned_values(contract_id)
    print(f"Removed {removed} orphaned contract values")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="contractflow-db", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Show connectivity and table columns")
    sub.add_parser("init", help="Create missing tables")
    reset = sub.add_parser("reset", help="Drop and recreate all tables")
    reset.add_argument("--yes", action="store_true", help="Confirm data loss")
    purge = sub.add_parser("purge-orphans", help="Delete values of removed blueprint fields")
    purge.add_argument("--contract-id", default=None)

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "check":
        # Models must be registered before reading metadata
        import contractflow.models  # noqa: F401
        return check_schema()
    if args.command == "init":
        database.init_db()
        return 0
    if args.command == "reset":
        if not args.yes:
            print("Refusing to drop tables without --yes", file=sys.stderr)
            return 2
        import contractflow.models  # noqa: F401
        database.drop_all_tables()
        database.init_db()
        return 0
    return purge_orphans(args.contract_id)


if __name__ == "__main__":
    sys.exit(main())
