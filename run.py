#!/usr/bin/env python3
"""
planemail - Flight finder for Gmail

Usage:
    python3 run.py                  # Interactive menu
    python3 run.py --flights        # Scan all accounts and print CSV
    python3 run.py --add-account    # Connect a Gmail account
    python3 run.py --help           # Show all options
"""

import logging
import re
import sys

from planemail import VERSION
from planemail.aggregator import aggregate_flights
from planemail.auth import add_account, get_accounts, get_authenticated_service, remove_account
from planemail.config import load_config
from planemail.email_handler import get_email_body, get_header
from planemail.errors import PlanemailError
from planemail.export import DESTINATIONS, FORMATS, export_flights
from planemail.mailbox import GmailMailbox
from planemail.scanner import scan_account, validate_date_range
from planemail.setup import (
    ask_flight_options,
    get_choice,
    print_header,
    remove_account_flow,
    validate_accounts,
)

logger = logging.getLogger("planemail")

# Gmail message ids are 16+ alphanumeric characters
_MESSAGE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9]{16,}$')

HELP_TEXT = """
planemail - find flight confirmations in Gmail

Usage:
    python3 run.py                          Interactive menu
    python3 run.py --flights [options]      Scan accounts and export flights
        --dates START END                   Only emails between two YYYY-MM-DD dates
        --accounts a@x.com,b@y.com          Only these accounts (default: all)
        --format csv|json|pdf               Output format (default: csv)
        --output console|file|both          Output destination (default: console)
    python3 run.py --add-account            Connect a Gmail account
    python3 run.py --remove-account EMAIL   Forget an account
    python3 run.py --list-accounts          Show connected accounts
    python3 run.py --inspect ID_OR_SUBJECT  Show one email as the scanner sees it
    python3 run.py --verbose ...            Show debug logging
    python3 run.py --help                   Show this help

First time? Save your Google OAuth client as credentials.json, then run:
    python3 run.py --add-account
"""


def get_flights(ready_accounts, date_range=None, fmt="csv", destination="console", config=None):
    """Scan each account in order, merge the results and export them.

    Args:
        ready_accounts: List of (Account, Gmail service) pairs
        date_range: Optional "YYYY-MM-DD YYYY-MM-DD" string
        fmt: Output format
        destination: Output destination
        config: Settings dict

    Returns:
        List of merged FlightEntity
    """
    config = config or load_config()
    streams = []

    try:
        for account, service in ready_accounts:
            print(f"\nFetching flights for {account.email}...")
            mailbox = GmailMailbox(service, num_retries=config["num_retries"])
            try:
                records = scan_account(
                    mailbox,
                    date_range,
                    account=account.email,
                    category=config["search_category"],
                    page_size=config["page_size"],
                    verbose=True,
                )
            except PlanemailError as e:
                print(f"\n  Skipping {account.email}: {e}")
                continue
            print(f"  {len(records)} flight email(s) found")
            streams.append((account.email, records))
    except KeyboardInterrupt:
        print("\n\nStopped - exporting the accounts scanned so far.")

    flights = aggregate_flights(streams)
    print(f"\n{len(flights)} unique flight(s)\n")
    export_flights(flights, fmt, destination, config["output_dir"])
    return flights


def get_flights_flow():
    ready = validate_accounts()
    if not ready:
        print("No valid accounts to search. Aborting.")
        return

    options = ask_flight_options([account.email for account, _ in ready])
    selected = [(a, s) for a, s in ready if a.email in options["emails"]]
    get_flights(selected, options["date_range"], options["format"], options["destination"])


def main_menu():
    """Interactive loop: get flights, add or remove accounts."""
    while True:
        accounts = get_accounts()
        print_header("planemail - Flight Finder")
        if accounts:
            print("Available Accounts:")
            for account in accounts:
                print(f"- {account.email}")
        else:
            print("No accounts configured.")
        print()

        action = get_choice(
            "What would you like to do?",
            ["Get Flights", "Add account", "Remove account", "Quit"]
        )
        try:
            if action == "Get Flights":
                get_flights_flow()
            elif action == "Add account":
                add_account()
            elif action == "Remove account":
                remove_account_flow()
            else:
                print("Goodbye!")
                return
        except PlanemailError as e:
            print(f"\nError: {e}")


def inspect_message(query):
    """Find one message by id or exact subject and print its decoded parts."""
    accounts = get_accounts()
    if not accounts:
        print("No accounts found. Please add an account first.")
        return False

    is_message_id = bool(_MESSAGE_ID_PATTERN.match(query))
    message = None
    found_in = None

    for account in accounts:
        print(f'Checking account: {account.email} for query: "{query}"')
        mailbox = GmailMailbox(get_authenticated_service(account))
        if is_message_id:
            message = mailbox.get_message(query)
        else:
            message = mailbox.search_first_by_subject(query, order="asc")
        if message:
            found_in = account.email
            break

    if not message or not message.get("payload"):
        print(f'Could not find email with query "{query}" in any account.')
        return False

    payload = message["payload"]
    headers = payload.get("headers") or []
    plain, html, raw_plain = get_email_body(payload)

    print(f"{'-' * 20} Email Details (found in {found_in}) {'-' * 20}")
    for part in payload.get("parts") or []:
        print(f"Part: {part.get('mimeType')}")
    print(f"From: {get_header(headers, 'From') or 'N/A'}")
    print(f"To: {get_header(headers, 'To') or 'N/A'}")
    print(f"Subject: {get_header(headers, 'Subject') or 'N/A'}")
    print(f"{'-' * 20} Raw Base64 Plain Text {'-' * 20}")
    print(raw_plain or "No raw plain text data found.")
    print(f"{'-' * 20} Decoded Plain Text Body {'-' * 20}")
    print(plain or "No plain text body found.")
    print(f"{'-' * 20} HTML Body {'-' * 20}")
    print(html or "No HTML body found.")
    return True


def _arg_value(args, flag, count=1):
    """Values following a flag, or None if the flag is absent or incomplete."""
    if flag not in args:
        return None
    idx = args.index(flag)
    values = args[idx + 1:idx + 1 + count]
    if len(values) < count or any(v.startswith("--") for v in values):
        return None
    return values if count > 1 else values[0]


def run_flights(args):
    dates = _arg_value(args, "--dates", count=2)
    date_range = " ".join(dates) if dates else None
    error = validate_date_range(date_range)
    if error:
        print(error)
        return 1

    fmt = (_arg_value(args, "--format") or "csv").lower()
    destination = (_arg_value(args, "--output") or "console").lower()
    if fmt not in FORMATS or destination not in DESTINATIONS:
        print(f"Format must be one of {', '.join(FORMATS)}; output one of {', '.join(DESTINATIONS)}")
        return 1

    accounts = get_accounts()
    wanted = _arg_value(args, "--accounts")
    if wanted:
        emails = [e.strip() for e in wanted.split(",") if e.strip()]
        accounts = [a for a in accounts if a.email in emails]
    if not accounts:
        print("No matching accounts. Run: python3 run.py --add-account")
        return 1

    ready = validate_accounts(accounts)
    if not ready:
        print("No valid accounts to search. Aborting.")
        return 1

    get_flights(ready, date_range, fmt, destination)
    return 0


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv

    if "--help" in args or "-h" in args:
        print(HELP_TEXT)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if ("--verbose" in args or "-v" in args) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )
    logger.debug("planemail v%s", VERSION)

    try:
        if "--add-account" in args:
            add_account()
        elif "--remove-account" in args:
            email = _arg_value(args, "--remove-account")
            if not email or not remove_account(email):
                print(f"No such account: {email}")
                return 1
        elif "--list-accounts" in args:
            for account in get_accounts():
                print(account.email)
        elif "--inspect" in args:
            query = _arg_value(args, "--inspect")
            if not query:
                print("Please provide a message ID or an exact subject line.")
                return 1
            return 0 if inspect_message(query) else 1
        elif "--flights" in args:
            return run_flights(args)
        else:
            main_menu()
    except PlanemailError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
