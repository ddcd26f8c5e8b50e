"""
Mailbox scanning.

Searches a Gmail mailbox for flight confirmation emails, decodes each
candidate and keeps the ones the extractor finds enough flight details in.
"""

import logging

from dateutil import parser as dateutil_parser

from .email_handler import get_email_body, get_subject, select_body
from .errors import MessageNotFound
from .mailbox import DEFAULT_PAGE_SIZE
from .models import ExtractionRecord
from .parser import extract_flight_info

logger = logging.getLogger(__name__)

# Phrases that show up in flight confirmation emails
FLIGHT_QUERIES = (
    "flight confirmation",
    "flight receipt",
    "your flight",
    "itinerary",
    "boarding pass",
    "e-ticket",
    "upcoming trip",
    "airline reservation",
    "flight details",
    "travel confirmation",
)

# Subjects containing any of these are replies, receipts, trackers or
# newsletters rather than bookings
SUBJECT_BLACKLIST = (
    "re:",
    "fwd:",
    "receipt",
    "ramp",
    "transaction",
    "tracked flight",
    "pantera",
    "needs an itinerary",
    "needs a receipt",
    "political pivot",
    "blockchain letter",
    "price change",
)


def build_search_query(date_range=None, category="travel", terms=FLIGHT_QUERIES):
    """Build the Gmail search query.

    Args:
        date_range: Optional "YYYY-MM-DD YYYY-MM-DD" string. Not validated
            here; see validate_date_range.
        category: Gmail category to restrict to, or None for all mail
        terms: Phrases to OR together

    Returns:
        Gmail search string
    """
    query = "(" + " OR ".join(f'"{term}"' for term in terms) + ")"
    if category:
        query = f"category:{category} {query}"

    if date_range:
        start, _, end = date_range.partition(" ")
        query += f" after:{start.replace('-', '/')} before:{end.replace('-', '/')}"

    return query


def validate_date_range(date_range):
    """Check a "START END" date range before it is handed to the query builder.

    Returns:
        Error message string, or None if the range is usable (or empty)
    """
    if not date_range:
        return None
    dates = date_range.split(" ")
    if len(dates) != 2:
        return "Please enter two dates separated by a space."
    for value in dates:
        try:
            dateutil_parser.isoparse(value)
        except ValueError:
            return f"Invalid date format: {value}"
    return None


def is_blacklisted_subject(subject, blacklist=SUBJECT_BLACKLIST):
    """Check if a subject contains any blacklisted phrase (case insensitive)."""
    subject_lower = (subject or "").lower()
    return any(keyword in subject_lower for keyword in blacklist)


def _process_message(message, message_id, account):
    """Run extraction over one fetched message.

    Returns:
        ExtractionRecord if the message describes a flight, otherwise None
    """
    subject = get_subject(message)
    if is_blacklisted_subject(subject):
        logger.debug("Skipping %s: blacklisted subject '%s'", message_id, subject[:50])
        return None

    plain, html, _ = get_email_body((message or {}).get("payload"))
    body = select_body(plain, html)
    info = extract_flight_info(subject + "\n" + body)

    record = ExtractionRecord(
        message_id=message_id,
        subject=subject,
        iatas=info.iatas,
        dates=info.dates,
        times=info.times,
        flight_numbers=info.flight_numbers,
        booking_refs=info.booking_refs,
        account=account,
    )
    if not record.qualifies():
        logger.debug("Skipping %s: not enough flight details", message_id)
        return None
    return record


def scan_account(mailbox, date_range=None, account="", category="travel",
                 page_size=DEFAULT_PAGE_SIZE, verbose=False):
    """Scan one mailbox for flight confirmation emails.

    Args:
        mailbox: Object with list_message_ids(query, page_token, max_results)
            and fetch_message(message_id)
        date_range: Optional "YYYY-MM-DD YYYY-MM-DD" string
        account: Label attached to every record
        category: Gmail category to restrict the search to
        page_size: Ids requested per page
        verbose: Print progress

    Returns:
        List of ExtractionRecord, oldest message first

    Raises:
        TransportError: Listing or fetching failed (other than a vanished message)
    """
    query = build_search_query(date_range, category=category)
    logger.debug("Search query for %s: %s", account or "mailbox", query)

    results = []
    checked = 0
    vanished = 0
    page_token = None

    while True:
        ids, page_token = mailbox.list_message_ids(query, page_token, max_results=page_size)

        for message_id in ids:
            checked += 1
            if verbose:
                print(f"\r    Analyzing: {checked} emails, {len(results)} flights", end="", flush=True)
            try:
                message = mailbox.fetch_message(message_id)
            except MessageNotFound:
                logger.info("Message %s vanished before it could be fetched", message_id)
                vanished += 1
                continue

            record = _process_message(message, message_id, account)
            if record:
                results.append(record)

        if not page_token:
            break

    if verbose:
        summary = f"\r    Analyzing: {checked} emails, {len(results)} flights"
        if vanished:
            summary += f" ({vanished} vanished)"
        print(summary)

    # Gmail lists newest first
    results.reverse()
    return results
