import socket
from unittest.mock import MagicMock

import pytest

from planemail import auth
from planemail.config import save_accounts
from planemail.errors import AuthExpired, ConfigError
from planemail.models import Account

AUTHORIZED_USER = {
    "token": "ya29.token",
    "refresh_token": "1//refresh",
    "client_id": "client.apps.googleusercontent.com",
    "client_secret": "secret",
    "expiry": "2999-01-01T00:00:00Z",
}


@pytest.fixture
def accounts_file(tmp_path):
    path = tmp_path / "accounts.json"
    save_accounts({
        "first@example.com": {"token": "a"},
        "second@example.com": {"token": "b"},
    }, path)
    return path


def test_get_accounts_keeps_order(accounts_file):
    accounts = auth.get_accounts(accounts_file)
    assert [a.email for a in accounts] == ["first@example.com", "second@example.com"]
    assert accounts[0].credentials == {"token": "a"}


def test_remove_account(accounts_file, capsys):
    assert auth.remove_account("first@example.com", accounts_file) is True
    assert [a.email for a in auth.get_accounts(accounts_file)] == ["second@example.com"]
    assert "removed" in capsys.readouterr().out


def test_remove_unknown_account(accounts_file):
    assert auth.remove_account("nobody@example.com", accounts_file) is False
    assert len(auth.get_accounts(accounts_file)) == 2


def test_missing_client_secrets(tmp_path):
    with pytest.raises(ConfigError):
        auth.add_account(credentials_file=tmp_path / "credentials.json",
                         accounts_file=tmp_path / "accounts.json")


def test_incomplete_stored_credentials():
    with pytest.raises(AuthExpired):
        auth.get_authenticated_service(Account("me@example.com", {"token": "only"}))


def test_valid_credentials_are_checked_against_profile(monkeypatch):
    service = MagicMock()
    service.users.return_value.getProfile.return_value.execute.return_value = {
        "emailAddress": "me@example.com"
    }
    monkeypatch.setattr(auth, "build_gmail_service", lambda creds: service)

    result = auth.get_authenticated_service(Account("me@example.com", dict(AUTHORIZED_USER)))

    assert result is service
    service.users.return_value.getProfile.assert_called_once_with(userId="me")


def test_expired_token_without_refresh_token(monkeypatch):
    creds = MagicMock(valid=False, refresh_token=None)
    monkeypatch.setattr(auth.Credentials, "from_authorized_user_info", lambda *a: creds)
    with pytest.raises(AuthExpired):
        auth.get_authenticated_service(Account("me@example.com", dict(AUTHORIZED_USER)))
    creds.refresh.assert_not_called()


def test_failed_refresh_means_expired(monkeypatch):
    creds = MagicMock(valid=False, refresh_token="1//refresh")
    creds.refresh.side_effect = auth.RefreshError("invalid_grant")
    monkeypatch.setattr(auth.Credentials, "from_authorized_user_info", lambda *a: creds)
    with pytest.raises(AuthExpired):
        auth.get_authenticated_service(Account("me@example.com", dict(AUTHORIZED_USER)))


def test_refreshed_token_is_saved(monkeypatch, tmp_path):
    accounts_file = tmp_path / "accounts.json"
    creds = MagicMock(valid=False, refresh_token="1//refresh")
    creds.to_json.return_value = '{"token": "fresh"}'
    monkeypatch.setattr(auth.Credentials, "from_authorized_user_info", lambda *a: creds)
    monkeypatch.setattr(auth, "build_gmail_service", lambda c: MagicMock())

    auth.get_authenticated_service(Account("me@example.com", dict(AUTHORIZED_USER)), accounts_file)

    creds.refresh.assert_called_once()
    assert auth.get_accounts(accounts_file)[0].credentials == {"token": "fresh"}


def test_find_free_port_skips_busy_ports():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("localhost", 0))
        port = busy.getsockname()[1]
        assert auth.find_free_port(port, attempts=1) == 0
