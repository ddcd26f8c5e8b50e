"""
Google account authentication.

Accounts are stored in accounts.json as email -> authorized user info (the
JSON google-auth produces for a Credentials object). The OAuth client
itself comes from credentials.json, downloaded from the Google Cloud console.
"""

import json
import logging
import socket
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from .config import CREDENTIALS_FILE, load_accounts, load_config, save_accounts
from .errors import AuthExpired, ConfigError
from .mailbox import GmailMailbox
from .models import Account

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]


def find_free_port(start=8989, attempts=50):
    """Find the first port at or above start that can be bound on localhost."""
    for port in range(start, start + attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind(("localhost", port))
            except OSError:
                continue
            return port
    # Let the OS choose
    return 0


def _client_secrets_path(credentials_file=None):
    path = Path(credentials_file or CREDENTIALS_FILE)
    if not path.exists():
        raise ConfigError(
            f"{path.name} not found. Download an OAuth client (Desktop app) "
            f"from the Google Cloud console and save it as {path}"
        )
    return path


def build_gmail_service(creds):
    """Create a Gmail API service for the given credentials."""
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def get_accounts(accounts_file=None):
    """All stored accounts, in the order they were added."""
    stored = load_accounts(accounts_file)
    return [Account(email=email, credentials=info) for email, info in stored.items()]


def _store_account(email, creds, accounts_file=None):
    accounts = load_accounts(accounts_file)
    accounts[email] = json.loads(creds.to_json())
    save_accounts(accounts, accounts_file)
    return Account(email=email, credentials=accounts[email])


def _run_auth_flow(credentials_file=None, port=None):
    flow = InstalledAppFlow.from_client_secrets_file(
        str(_client_secrets_path(credentials_file)), SCOPES
    )
    if port is None:
        port = load_config()["oauth_port"]
    print("Opening browser for authentication...")
    return flow.run_local_server(
        port=find_free_port(port),
        access_type="offline",
        prompt="consent",
        success_message="Authenticated! You can close this window and return to your terminal.",
    )


def add_account(credentials_file=None, accounts_file=None, port=None):
    """Authorize a new Gmail account and store its credentials.

    Returns:
        The stored Account
    """
    creds = _run_auth_flow(credentials_file, port)
    email = GmailMailbox(build_gmail_service(creds)).get_profile_email()
    if not email:
        raise AuthExpired("Could not get email from profile.")

    account = _store_account(email, creds, accounts_file)
    print(f"Account for {email} added successfully.")
    return account


def reauthenticate_account(email, credentials_file=None, accounts_file=None, port=None):
    """Run the OAuth flow again for an existing account."""
    creds = _run_auth_flow(credentials_file, port)
    account = _store_account(email, creds, accounts_file)
    print(f"Account for {email} re-authenticated successfully.")
    return account


def remove_account(email, accounts_file=None):
    """Delete an account from the store.

    Returns:
        True if the account existed
    """
    accounts = load_accounts(accounts_file)
    if email not in accounts:
        return False
    del accounts[email]
    save_accounts(accounts, accounts_file)
    print(f"Account {email} removed successfully.")
    return True


def get_authenticated_service(account, accounts_file=None):
    """Build a Gmail service for a stored account and check it works.

    Refreshed tokens are written back to the account store.

    Raises:
        AuthExpired: The stored token is invalid or expired
    """
    try:
        creds = Credentials.from_authorized_user_info(account.credentials, SCOPES)
    except ValueError as e:
        raise AuthExpired(f"Stored credentials for {account.email} are incomplete: {e}") from e

    if not creds.valid:
        if not creds.refresh_token:
            raise AuthExpired(f"Token for {account.email} is invalid or expired.")
        try:
            creds.refresh(Request())
        except RefreshError as e:
            raise AuthExpired(f"Token for {account.email} is invalid or expired.") from e
        _store_account(account.email, creds, accounts_file)
        logger.debug("Refreshed token for %s", account.email)

    service = build_gmail_service(creds)
    # Raises AuthExpired if the token is rejected
    GmailMailbox(service).get_profile_email()
    return service
