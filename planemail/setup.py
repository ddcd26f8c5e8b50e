"""
Interactive prompts: account setup and the "get flights" questions.
"""

from .auth import (
    add_account,
    get_accounts,
    get_authenticated_service,
    reauthenticate_account,
    remove_account,
)
from .errors import PlanemailError
from .export import DESTINATIONS, FORMATS
from .scanner import validate_date_range


def print_header(text):
    """Print a header banner."""
    print()
    print("=" * 50)
    print(f"  {text}")
    print("=" * 50)
    print()


def get_input(prompt, default=None, required=True):
    """Get user input with optional default value.

    Args:
        prompt: The prompt to display
        default: Default value if user presses Enter
        required: Whether a value is required

    Returns:
        User input string
    """
    if default:
        display_prompt = f"{prompt} [{default}]: "
    else:
        display_prompt = f"{prompt}: "

    while True:
        value = input(display_prompt).strip()
        if not value and default:
            return default
        elif value:
            return value
        elif not required:
            return ""
        else:
            print("  This field is required. Please enter a value.")


def get_choice(prompt, options, default=None):
    """Let the user pick one option by number.

    Args:
        prompt: The question to display
        options: List of option strings
        default: Option returned when the user presses Enter

    Returns:
        The chosen option string
    """
    print(prompt)
    for i, option in enumerate(options, 1):
        print(f"  {i}. {option}")

    default_num = str(options.index(default) + 1) if default in options else None
    while True:
        value = get_input("Choice", default_num)
        if value.isdigit() and 1 <= int(value) <= len(options):
            return options[int(value) - 1]
        print(f"  Please enter a number between 1 and {len(options)}")


def get_multi_choice(prompt, options):
    """Let the user pick several options, e.g. "1,3". Enter selects all.

    Returns:
        List of chosen option strings, in the original order
    """
    print(prompt)
    for i, option in enumerate(options, 1):
        print(f"  {i}. {option}")

    while True:
        value = get_input("Choices (comma separated, Enter for all)", required=False)
        if not value:
            return list(options)
        picks = [p.strip() for p in value.split(",") if p.strip()]
        if all(p.isdigit() and 1 <= int(p) <= len(options) for p in picks):
            chosen = {int(p) - 1 for p in picks}
            return [option for i, option in enumerate(options) if i in chosen]
        print(f"  Please enter numbers between 1 and {len(options)}")


def get_date_range():
    """Ask for an optional "YYYY-MM-DD YYYY-MM-DD" range."""
    while True:
        value = get_input(
            "Enter date range (YYYY-MM-DD YYYY-MM-DD), or leave blank for all",
            required=False
        )
        error = validate_date_range(value)
        if not error:
            return value or None
        print(f"  {error}")


def validate_accounts(accounts=None):
    """Check every stored account, asking what to do about expired ones.

    Returns:
        List of (Account, Gmail service) pairs that are ready to scan.
        Empty if the user aborted.
    """
    if accounts is None:
        accounts = get_accounts()
        if not accounts:
            print("No accounts found. Please add one first.")
            add_account()
            accounts = get_accounts()

    valid = []
    for account in accounts:
        try:
            valid.append((account, get_authenticated_service(account)))
            print(f"- {account.email}: OK")
            continue
        except PlanemailError:
            print(f"- {account.email}: Needs re-authentication.")

        choice = get_choice(
            f"Authentication for {account.email} has expired. What would you like to do?",
            ["Re-authenticate", "Skip and Remove Account", "Abort"]
        )
        if choice == "Abort":
            return []
        if choice == "Skip and Remove Account":
            remove_account(account.email)
            continue

        try:
            updated = reauthenticate_account(account.email)
            valid.append((updated, get_authenticated_service(updated)))
        except PlanemailError as e:
            print(f"Re-authentication failed for {account.email}: {e}")
            decision = get_choice("What to do?", ["Skip and Remove Account", "Abort"])
            if decision == "Abort":
                return []
            remove_account(account.email)

    return valid


def ask_flight_options(emails):
    """Ask the questions needed to run a scan.

    Returns:
        Dict with date_range, emails, format and destination
    """
    return {
        "date_range": get_date_range(),
        "emails": get_multi_choice("Which accounts do you want to search?", emails),
        "format": get_choice("Output format:", [f.upper() for f in FORMATS], default="CSV").lower(),
        "destination": get_choice("Output destination:", list(DESTINATIONS), default="console"),
    }


def remove_account_flow():
    accounts = get_accounts()
    if not accounts:
        print("No accounts to remove.")
        return
    email = get_choice("Which account would you like to remove?", [a.email for a in accounts])
    remove_account(email)
