"""
Message decoding: headers and plain/HTML bodies of Gmail API messages.

Gmail returns a message as a payload tree of parts, each with a mimeType,
a headers list and a base64url encoded body. Nothing in here raises on a
malformed message; missing pieces come back as empty strings.
"""

import base64
import binascii
import logging
import re
from collections import deque
from html import unescape

logger = logging.getLogger(__name__)

_CHARSET_PATTERN = re.compile(r'charset="?([\w\-]+)"?', re.IGNORECASE)
_SCRIPT_STYLE_PATTERN = re.compile(
    r'<(script|style)\b[^>]*>[\s\S]*?</(script|style)>', re.IGNORECASE
)
_TAG_PATTERN = re.compile(r'<[^>]*>')


def get_header(headers, name):
    """Find a header value by name (case insensitive).

    Args:
        headers: List of {"name": ..., "value": ...} dicts
        name: Header name to look for

    Returns:
        Header value or empty string if absent
    """
    wanted = name.lower()
    for header in headers or []:
        if not isinstance(header, dict):
            continue
        if (header.get("name") or "").lower() == wanted:
            return header.get("value") or ""
    return ""


def get_subject(message):
    """Subject line of a Gmail message resource."""
    payload = (message or {}).get("payload")
    if not isinstance(payload, dict):
        return ""
    headers = payload.get("headers")
    return get_header(headers if isinstance(headers, list) else None, "Subject")


def _part_charset(part):
    content_type = get_header(part.get("headers"), "Content-Type")
    match = _CHARSET_PATTERN.search(content_type)
    return match.group(1).lower() if match else None


def _decode_body_data(data, charset=None):
    """Decode base64url body data to text with charset fallbacks.

    Returns:
        Decoded string or empty string on failure
    """
    if not data:
        return ""
    try:
        # Gmail uses the url-safe alphabet; accept the standard one too
        data = data.replace('+', '-').replace('/', '_')
        raw = base64.urlsafe_b64decode(data + '=' * (-len(data) % 4))
    except (binascii.Error, ValueError) as e:
        logger.debug("Could not base64 decode body: %s", e)
        return ""

    charset_attempts = []
    if charset:
        charset_attempts.append(charset)
    charset_attempts.extend(['utf-8', 'iso-8859-1', 'cp1252'])

    for cs in dict.fromkeys(charset_attempts):
        try:
            return raw.decode(cs)
        except (UnicodeDecodeError, LookupError):
            continue

    return raw.decode('utf-8', errors='replace')


def strip_html(html_text):
    """Remove script/style blocks and tags, keeping the visible text.

    Each tag becomes a newline so words on either side stay apart.
    """
    if not html_text:
        return ""
    text = _SCRIPT_STYLE_PATTERN.sub('', html_text)
    text = _TAG_PATTERN.sub('\n', text)
    return unescape(text)


def _find_part(parts, mime_type):
    """First part with the given mime type, direct children before nested ones."""
    queue = deque(parts)
    while queue:
        part = queue.popleft()
        if not isinstance(part, dict):
            continue
        if part.get("mimeType") == mime_type:
            return part
        queue.extend(part.get("parts") or [])
    return None


def _raw_data(part):
    body = (part or {}).get("body") or {}
    return body.get("data") or ""


def get_email_body(payload):
    """Extract the email bodies from a Gmail payload tree.

    Args:
        payload: The "payload" dict of a Gmail message resource

    Returns:
        Tuple of (plain_text_body, stripped_html_body, raw_encoded_plain_body)
    """
    if not isinstance(payload, dict):
        return "", "", ""

    try:
        parts = payload.get("parts") or []
        if parts:
            plain_part = _find_part(parts, "text/plain")
            html_part = _find_part(parts, "text/html")
        else:
            mime_type = payload.get("mimeType")
            plain_part = payload if mime_type == "text/plain" else None
            html_part = payload if mime_type == "text/html" else None

        raw_plain = _raw_data(plain_part)
        plain = _decode_body_data(raw_plain, _part_charset(plain_part)) if plain_part else ""
        html = ""
        if html_part:
            html = strip_html(_decode_body_data(_raw_data(html_part), _part_charset(html_part)))
        return plain, html, raw_plain

    except (AttributeError, TypeError) as e:
        logger.debug("Malformed payload: %s", e)
        return "", "", ""


def select_body(plain, html):
    """Pick the single body used for extraction: plain text if any, else HTML."""
    return plain or html or ""
