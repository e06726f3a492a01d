"""Command-line maintenance for the SchoolConnect database."""
from __future__ import annotations

import argparse
import logging
import sys

from fastapi import HTTPException

from schoolconnect.constants import ROLE_ADMIN, ROLE_USER
from schoolconnect.database import SessionLocal, get_engine, reset_db
from schoolconnect.services import set_user_role

logger = logging.getLogger("schoolconnect.tools.manage_db")


def _run_reset(args: argparse.Namespace) -> int:
    if not args.yes:
        answer = input(f"Drop every table in {get_engine().url.render_as_string(hide_password=True)}? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("Aborted.")
            return 1
    reset_db()
    print("Database reset: all tables dropped and recreated.")
    return 0


def _run_set_role(args: argparse.Namespace, role: str) -> int:
    with SessionLocal() as db:
        try:
            user = set_user_role(db, args.username, role)
        except HTTPException as exc:
            print(f"Could not update {args.username}: {exc.detail}", file=sys.stderr)
            return 2
    print(f"{user.username} is now {user.role}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintenance commands for the SchoolConnect database.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    reset = subcommands.add_parser("reset", help="Drop every table and recreate the schema.")
    reset.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")
    reset.set_defaults(func=_run_reset)

    promote = subcommands.add_parser("promote", help="Grant the admin role to an account.")
    promote.add_argument("username", help="Handle of the account to promote.")
    promote.set_defaults(func=lambda args: _run_set_role(args, ROLE_ADMIN))

    demote = subcommands.add_parser("demote", help="Revoke the admin role from an account.")
    demote.add_argument("username", help="Handle of the account to demote.")
    demote.set_defaults(func=lambda args: _run_set_role(args, ROLE_USER))

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.error("Please supply a sub-command")
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
