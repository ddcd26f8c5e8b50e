"""
Gmail mailbox access.

Thin wrapper around the Gmail API service that exposes the two calls the
scanner needs and turns HTTP failures into planemail errors.
"""

import logging

from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from .errors import AuthExpired, MessageNotFound, TransportError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def _translate_http_error(error, context):
    status = getattr(error.resp, "status", None)
    try:
        status = int(status)
    except (TypeError, ValueError):
        status = None

    message = f"{context}: {error}"
    if status == 404:
        return MessageNotFound(message, status=status)
    if status == 401:
        return AuthExpired(message, status=status)
    return TransportError(message, status=status)


class GmailMailbox:
    """One authenticated Gmail mailbox."""

    def __init__(self, service, user_id="me", num_retries=3):
        self.service = service
        self.user_id = user_id
        self.num_retries = num_retries

    def _execute(self, request, context):
        try:
            return request.execute(num_retries=self.num_retries)
        except HttpError as e:
            raise _translate_http_error(e, context) from e
        except RefreshError as e:
            raise AuthExpired(f"{context}: {e}") from e

    def list_message_ids(self, query, page_token=None, max_results=DEFAULT_PAGE_SIZE):
        """List one page of message ids matching a search query.

        Returns:
            Tuple of (list of ids, next page token or None)
        """
        kwargs = {"userId": self.user_id, "q": query, "maxResults": max_results}
        if page_token:
            kwargs["pageToken"] = page_token

        response = self._execute(
            self.service.users().messages().list(**kwargs),
            "Listing messages failed"
        )
        ids = [m["id"] for m in response.get("messages", []) if m.get("id")]
        return ids, response.get("nextPageToken") or None

    def fetch_message(self, message_id):
        """Fetch the full message resource.

        Raises:
            MessageNotFound: The message no longer exists
            AuthExpired: Credentials are no longer valid
            TransportError: Any other API failure
        """
        return self._execute(
            self.service.users().messages().get(userId=self.user_id, id=message_id),
            f"Fetching message {message_id} failed"
        )

    def get_message(self, message_id):
        """Fetch a message, returning None if it does not exist."""
        try:
            return self.fetch_message(message_id)
        except MessageNotFound:
            return None

    def search_first_by_subject(self, subject, order="desc"):
        """Find the newest ("desc") or oldest ("asc") message with a subject.

        Returns:
            Message resource or None if nothing matched
        """
        query = f'subject:"{subject}"'

        if order == "desc":
            ids, _ = self.list_message_ids(query, max_results=1)
            return self.get_message(ids[0]) if ids else None

        # Results come newest first, so the oldest is the last id of the last page
        last_page = []
        page_token = None
        while True:
            ids, page_token = self.list_message_ids(query, page_token)
            if ids:
                last_page = ids
            if not page_token:
                break

        return self.get_message(last_page[-1]) if last_page else None

    def get_profile_email(self):
        """Email address of the mailbox owner."""
        profile = self._execute(
            self.service.users().getProfile(userId=self.user_id),
            "Reading profile failed"
        )
        return profile.get("emailAddress")
