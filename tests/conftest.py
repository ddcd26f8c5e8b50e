import base64

import pytest

from planemail.errors import MessageNotFound


def encode(text):
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def make_part(mime_type, text=None, parts=None, headers=None):
    part = {"mimeType": mime_type, "headers": headers or [], "body": {}}
    if text is not None:
        part["body"]["data"] = encode(text)
    if parts is not None:
        part["parts"] = parts
    return part


def make_message(message_id, subject, plain=None, html=None):
    """A Gmail API message resource with a multipart/alternative payload."""
    parts = []
    if plain is not None:
        parts.append(make_part("text/plain", plain))
    if html is not None:
        parts.append(make_part("text/html", html))
    payload = make_part("multipart/alternative", parts=parts,
                        headers=[{"name": "Subject", "value": subject}])
    return {"id": message_id, "payload": payload}


class FakeMailbox:
    """In-memory stand-in for GmailMailbox.

    pages is a list of id lists, newest first like Gmail.
    """

    def __init__(self, pages, messages, missing=()):
        self.pages = pages
        self.messages = messages
        self.missing = set(missing)
        self.queries = []
        self.fetched = []

    def list_message_ids(self, query, page_token=None, max_results=50):
        self.queries.append((query, page_token, max_results))
        index = int(page_token) if page_token else 0
        next_token = str(index + 1) if index + 1 < len(self.pages) else None
        return list(self.pages[index]) if self.pages else [], next_token

    def fetch_message(self, message_id):
        self.fetched.append(message_id)
        if message_id in self.missing:
            raise MessageNotFound(f"{message_id} not found", status=404)
        return self.messages[message_id]


@pytest.fixture
def confirmation_text():
    return ("Dublin (DUB) to London (LHR) on 2024-05-01 14:30, "
            "Flight EI 154, Booking Ref: AB12CD")
