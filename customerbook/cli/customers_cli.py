# customerbook/cli/customers_cli.py

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from customerbook.config import get_settings
from customerbook.db.session import Database
from customerbook.errors import NotFoundError, StorageError, ValidationError
from customerbook.logging_config import configure_logging
from customerbook.services.customers_service import CustomerStore

EXIT_NOT_FOUND = 1
EXIT_INVALID = 2
EXIT_STORAGE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="customerbook-cli",
        description="customerbook CLI: manage customer records from the shell. Output is JSON.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create missing tables (use `alembic upgrade head` in production).")

    create = sub.add_parser("create", help="Create a customer.")
    create.add_argument("--name", required=True)
    create.add_argument("--email", required=True)
    create.add_argument("--phone", required=True)
    create.add_argument("--address", required=True)

    get = sub.add_parser("get", help="Fetch one customer by id.")
    get.add_argument("id", type=int)

    sub.add_parser("list", help="List every customer.")

    recent = sub.add_parser("recent", help="List the most recently created customers.")
    recent.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of customers to return. Defaults to RECENT_LIMIT from settings.",
    )

    search = sub.add_parser("search", help="Search customers by name or email.")
    search.add_argument("query")

    update = sub.add_parser(
        "update",
        help="Partially update a customer. Only the options given are changed.",
    )
    update.add_argument("id", type=int)
    update.add_argument("--name")
    update.add_argument("--email")
    update.add_argument("--phone")
    update.add_argument("--address")

    return parser


def _emit(payload) -> None:
    if payload is None:
        print("null")
    elif isinstance(payload, list):
        print(json.dumps([item.model_dump(mode="json") for item in payload], indent=2))
    else:
        print(payload.model_dump_json(indent=2))


def _run(args: argparse.Namespace, store: CustomerStore, database: Database) -> int:
    if args.command == "init-db":
        database.create_all()
        print("Tables created.")
        return 0

    if args.command == "create":
        _emit(store.create(
            {"name": args.name, "email": args.email, "phone": args.phone, "address": args.address}
        ))
    elif args.command == "get":
        customer = store.get(args.id)
        _emit(customer)
        if customer is None:
            return EXIT_NOT_FOUND
    elif args.command == "list":
        _emit(store.list_all())
    elif args.command == "recent":
        _emit(store.list_recent(args.limit))
    elif args.command == "search":
        _emit(store.search(args.query))
    elif args.command == "update":
        # options left off the command line are omitted from the update, not blanked
        fields = {
            name: getattr(args, name)
            for name in ("name", "email", "phone", "address")
            if getattr(args, name) is not None
        }
        _emit(store.update({"id": args.id, **fields}))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    logger = logging.getLogger(__name__)

    with Database.from_settings(settings) as database:
        store = CustomerStore(database, recent_limit=settings.recent_limit)
        try:
            return _run(args, store, database)
        except ValidationError as exc:
            print(f"Invalid input: {exc}", file=sys.stderr)
            for err in exc.errors:
                print(f"  {err['field']}: {err['message']}", file=sys.stderr)
            return EXIT_INVALID
        except NotFoundError as exc:
            print(str(exc), file=sys.stderr)
            return EXIT_NOT_FOUND
        except StorageError as exc:
            logger.error("Storage failure: %s", exc)
            print(f"Storage failure: {exc}", file=sys.stderr)
            return EXIT_STORAGE


if __name__ == "__main__":
    sys.exit(main())
