"""Console interface for the finance dashboard backend."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

from finance_core.config import Settings
from finance_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from finance_core.services import ResourceServices, build_services
from finance_core.storage import Database

DEFAULT_PORT = 8282

RECORD_KINDS = ("expense", "income", "goal")


def _format_user(user: Dict[str, Any]) -> str:
    return f"[{user['id']}] {user['name']} <{user['email']}>"


def _format_record(record: Dict[str, Any]) -> str:
    if "startDate" in record:
        period = f"{record['startDate']} -> {record['endDate']} ({record['type']})"
    else:
        period = record["date"]
    return (
        f"[{record['id']}] user {record['userId']} | {period} | {record['amount']}\n"
        f"  Category: {record['category']}\n"
        f"  Description: {record.get('description') or '-'}\n"
    )


def _service_for(services: ResourceServices, kind: str):
    return {
        "expense": services.expenses,
        "income": services.incomes,
        "goal": services.goals,
    }[kind]


def handle_users(args: argparse.Namespace, services: ResourceServices) -> None:
    if args.command == "list":
        users = services.users.list_all()
        if not users:
            print("No users found.")
            return
        for user in users:
            print(_format_user(user.to_dict()))
    elif args.command == "show":
        if args.id is not None:
            user = services.users.get_by_id(args.id)
        else:
            user = services.users.get_by_email(args.email)
        print(_format_user(user.to_dict()))


def handle_records(args: argparse.Namespace, services: ResourceServices) -> None:
    service = _service_for(services, args.entity)
    if args.command == "list":
        if args.user is not None:
            records = service.list_by_owner(args.user)
        else:
            records = service.list_all()
        if not records:
            print(f"No {args.entity} records found.")
            return
        print(f"Found {len(records)} {args.entity} record(s):")
        for record in records:
            print(_format_record(record.to_dict()))
    elif args.command == "delete":
        service.delete_batch(args.ids)
        print(f"Deleted {args.entity} record(s): {', '.join(str(i) for i in args.ids)}")


def serve(args: argparse.Namespace, settings: Settings, database: Database) -> None:
    from api.app import create_app

    app = create_app(settings, database)
    app.run(host=args.host, port=args.port, debug=settings.is_development)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Finance Dashboard backend")
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy database URL (default: $FINANCE_DASHBOARD_DATABASE_URL or sqlite:///finance.db)",
    )

    subparsers = parser.add_subparsers(dest="entity", required=True)

    subparsers.add_parser("init-db", help="Create the database schema")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT)

    users_parser = subparsers.add_parser("users", help="Inspect users")
    users_sub = users_parser.add_subparsers(dest="command", required=True)
    users_sub.add_parser("list", help="List all users")
    users_show = users_sub.add_parser("show", help="Show one user")
    lookup = users_show.add_mutually_exclusive_group(required=True)
    lookup.add_argument("--id", type=int)
    lookup.add_argument("--email")

    for kind in RECORD_KINDS:
        kind_parser = subparsers.add_parser(kind, help=f"Manage {kind} records")
        kind_sub = kind_parser.add_subparsers(dest="command", required=True)
        kind_list = kind_sub.add_parser("list", help=f"List {kind} records")
        kind_list.add_argument("--user", type=int, help="Only records owned by this user id")
        kind_delete = kind_sub.add_parser("delete", help=f"Delete {kind} records by id")
        kind_delete.add_argument("ids", type=int, nargs="+")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.database_url:
        settings = replace(settings, database_url=args.database_url)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        with Database(settings.database_url, echo=settings.sql_echo) as database:
            database.create_schema()
            if args.entity == "init-db":
                print(f"Schema ready on {settings.database_url}")
            elif args.entity == "serve":
                serve(args, settings, database)
            else:
                services = build_services(database, check_owners=settings.check_owners)
                if args.entity == "users":
                    handle_users(args, services)
                else:
                    handle_records(args, services)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
