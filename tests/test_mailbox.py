from unittest.mock import MagicMock, Mock

import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from planemail.errors import AuthExpired, MessageNotFound, TransportError
from planemail.mailbox import GmailMailbox


def http_error(status):
    return HttpError(Mock(status=status, reason="error"), b"")


@pytest.fixture
def service():
    return MagicMock()


def messages_api(service):
    return service.users.return_value.messages.return_value


def test_list_message_ids(service):
    api = messages_api(service)
    api.list.return_value.execute.return_value = {
        "messages": [{"id": "a1", "threadId": "t"}, {"id": "b2", "threadId": "t"}],
        "nextPageToken": "tok",
    }
    mailbox = GmailMailbox(service, num_retries=5)

    ids, token = mailbox.list_message_ids("itinerary", max_results=10)

    assert ids == ["a1", "b2"]
    assert token == "tok"
    api.list.assert_called_once_with(userId="me", q="itinerary", maxResults=10)
    api.list.return_value.execute.assert_called_once_with(num_retries=5)


def test_list_last_page(service):
    messages_api(service).list.return_value.execute.return_value = {}
    mailbox = GmailMailbox(service)
    assert mailbox.list_message_ids("q", page_token="tok") == ([], None)
    messages_api(service).list.assert_called_once_with(userId="me", q="q", maxResults=50, pageToken="tok")


@pytest.mark.parametrize("status,error_type", [
    (404, MessageNotFound),
    (401, AuthExpired),
    (500, TransportError),
    (429, TransportError),
])
def test_http_errors_are_translated(service, status, error_type):
    messages_api(service).get.return_value.execute.side_effect = http_error(status)
    with pytest.raises(error_type) as excinfo:
        GmailMailbox(service).fetch_message("a1")
    assert excinfo.value.status == status


def test_not_found_is_a_transport_error(service):
    messages_api(service).get.return_value.execute.side_effect = http_error(404)
    with pytest.raises(TransportError):
        GmailMailbox(service).fetch_message("a1")


def test_refresh_error_means_expired_auth(service):
    messages_api(service).list.return_value.execute.side_effect = RefreshError("invalid_grant")
    with pytest.raises(AuthExpired):
        GmailMailbox(service).list_message_ids("q")


def test_get_message_returns_none_when_missing(service):
    messages_api(service).get.return_value.execute.side_effect = http_error(404)
    assert GmailMailbox(service).get_message("a1") is None


def test_get_message_reraises_other_errors(service):
    messages_api(service).get.return_value.execute.side_effect = http_error(503)
    with pytest.raises(TransportError):
        GmailMailbox(service).get_message("a1")


def test_search_newest_by_subject(service):
    api = messages_api(service)
    api.list.return_value.execute.return_value = {"messages": [{"id": "new"}], "nextPageToken": "x"}
    api.get.return_value.execute.return_value = {"id": "new"}

    assert GmailMailbox(service).search_first_by_subject("Trip") == {"id": "new"}
    api.list.assert_called_once_with(userId="me", q='subject:"Trip"', maxResults=1)
    api.get.assert_called_once_with(userId="me", id="new")


def test_search_oldest_by_subject_walks_all_pages(service):
    api = messages_api(service)
    api.list.return_value.execute.side_effect = [
        {"messages": [{"id": "c"}, {"id": "b"}], "nextPageToken": "p2"},
        {"messages": [{"id": "a"}]},
    ]
    api.get.return_value.execute.return_value = {"id": "a"}

    assert GmailMailbox(service).search_first_by_subject("Trip", order="asc") == {"id": "a"}
    api.get.assert_called_once_with(userId="me", id="a")


def test_search_by_subject_without_match(service):
    messages_api(service).list.return_value.execute.return_value = {}
    mailbox = GmailMailbox(service)
    assert mailbox.search_first_by_subject("Nothing") is None
    assert mailbox.search_first_by_subject("Nothing", order="asc") is None


def test_profile_email(service):
    service.users.return_value.getProfile.return_value.execute.return_value = {
        "emailAddress": "me@example.com"
    }
    assert GmailMailbox(service).get_profile_email() == "me@example.com"
