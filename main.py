import argparse
import getpass
import logging
import os
import sys

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager, default_db_path
from database.migrations import get_db_health
from database.transaction_dao import TransactionDAO

from services.auth_service import AuthService
from services.filter_service import FilterService
from services.report_service import ReportService
from services.statement_parser import parse_statement_file
from services.transaction_service import TransactionService

from utils.app_config import (
    get_db_folder,
    get_log_level,
    set_db_folder,
)
from utils.constants import APP_NAME, AccountFilter
from utils.crypto import FieldCipher
from utils.currency import format_amount
from utils.date_helpers import format_display_date, parse_display_date
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _date_arg(value: str):
    parsed = parse_display_date(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, use DD/MM/YYYY")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="budget-manager", description=APP_NAME)
    parser.add_argument("--db-folder", help="Folder holding budget.db")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def user_command(name, help_text):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--user", required=True)
        return cmd

    def date_range(cmd):
        cmd.add_argument("--after", type=_date_arg, help="On or after DD/MM/YYYY")
        cmd.add_argument("--before", type=_date_arg, help="On or before DD/MM/YYYY")

    cmd = user_command("import", "Import a bank statement export")
    cmd.add_argument("file")
    cmd.add_argument("--account", help="Account name, read from the statement if omitted")

    cmd = user_command("list", "List transactions")
    cmd.add_argument("--account", help="Only this account")
    date_range(cmd)
    toggle = cmd.add_mutually_exclusive_group()
    toggle.add_argument("--credits", action="store_true", help="Only credits")
    toggle.add_argument("--debits", action="store_true", help="Only debits")

    user_command("accounts", "List account names")

    cmd = user_command("totals", "Total credit, debit and fluctuation")
    date_range(cmd)

    cmd = user_command("describe", "Set a custom description")
    cmd.add_argument("id", type=int)
    cmd.add_argument("text")

    cmd = user_command("chart", "Save the balance chart as an image")
    cmd.add_argument("output")
    cmd.add_argument("--account", help="Only this account")
    date_range(cmd)

    cmd = user_command("clear", "Delete all transactions of the user")
    cmd.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    sub.add_parser("health", help="Check the database schema")

    cmd = sub.add_parser("config", help="Show or change bootstrap settings")
    cmd.add_argument("--set-db-folder")
    return parser


def _print_transactions(transactions):
    for tx in transactions:
        print(
            f"{tx.id:>6}  {format_display_date(tx.date)}  {tx.account:<20.20}  "
            f"{tx.display_description:<40.40}  {tx.credit_amount:>10.2f}  {tx.debit_amount:>10.2f}"
        )


def run_config(args) -> int:
    if args.set_db_folder:
        set_db_folder(args.set_db_folder)
    print(f"db_folder: {get_db_folder() or default_db_path().parent}")
    print(f"log_level: {get_log_level()}")
    return 0


def run_user_command(args, db: DatabaseManager) -> int:
    password = getpass.getpass(f"Password for {args.user}: ")
    try:
        logged_in = AuthService(db).login(args.user, password)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 2
    if not logged_in:
        print("Wrong username or password.", file=sys.stderr)
        return 1

    # ── Services ─────────────────────────────────────────────────────────────
    tx_svc = TransactionService(TransactionDAO(db, FieldCipher(password)))
    filter_svc = FilterService(tx_svc, args.user)
    report_svc = ReportService(tx_svc, filter_svc, args.user)
    account = getattr(args, "account", None) or AccountFilter.ALL

    if args.command == "import":
        parsed = parse_statement_file(args.file, args.user, args.account)
        inserted = tx_svc.upload_transactions(parsed)
        print(f"Imported {inserted} new of {len(parsed)} transactions.")
    elif args.command == "list":
        _print_transactions(filter_svc.get_transactions(
            account, args.credits, args.debits,
            before_date=args.before, after_date=args.after,
        ))
    elif args.command == "accounts":
        for name in tx_svc.get_accounts(args.user):
            print(name)
    elif args.command == "totals":
        totals = report_svc.get_totals(args.after, args.before)
        print(f"Credit:      {format_amount(totals['credit'])}")
        print(f"Debit:       {format_amount(totals['debit'])}")
        print(f"Fluctuation: {format_amount(totals['fluctuation'])}")
    elif args.command == "describe":
        if not tx_svc.update_transaction_description(args.id, args.text):
            print(f"No transaction with id {args.id}.", file=sys.stderr)
            return 1
    elif args.command == "chart":
        series = report_svc.get_chart_series(account, args.after, args.before)
        report_svc.build_chart_figure(series).savefig(args.output)
        print(f"Chart written to {args.output}")
    elif args.command == "clear":
        if not args.yes:
            answer = input(f"Delete every transaction of {args.user}? [y/N] ")
            if answer.strip().lower() != "y":
                return 0
        print(f"Deleted {tx_svc.clear_transactions(args.user)} transactions.")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else get_log_level())

    if args.command == "config":
        return run_config(args)

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager(default_db_path(args.db_folder or get_db_folder()))
    logger.debug("Using database %s", db.db_path)

    if args.command == "health":
        if not db.exists():
            print(f"No database at {db.db_path}", file=sys.stderr)
            return 1
        print(get_db_health(db))
        return 0

    return run_user_command(args, db)


if __name__ == "__main__":
    sys.exit(main())
