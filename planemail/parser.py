"""
Flight information extraction.

Airport codes are found with an ordered set of strategies, most reliable
first; the first one that turns up two codes wins:
1. Parenthesised codes - "Dublin (DUB) to London (LHR)"
2. Direct pairs - "DUB-LHR" or "DUB to LHR"
3. Airport and city names - "Dublin ... London"

Whatever strategy wins, its codes must be known IATA codes.

Dates, times, flight numbers and booking references are pulled out
independently with fixed patterns. Nothing is normalised here; values keep
the form they had in the email.
"""

import re
import logging
from typing import List, NamedTuple

from .airports import AIRPORT_NAME_TO_IATA, is_valid_airport

logger = logging.getLogger(__name__)


class FlightInfo(NamedTuple):
    iatas: List[str]
    dates: List[str]
    times: List[str]
    flight_numbers: List[str]
    booking_refs: List[str]


# ============================================================================
# TEXT SANITIZING
# ============================================================================

_DISALLOWED_CHARS = re.compile(r'[^a-zA-Z0-9\s\-():/]')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def sanitize_text(text):
    """Strip punctuation and unicode noise and collapse whitespace.

    Keeps letters, digits and the ( ) - / : characters the patterns below
    rely on.
    """
    if not text:
        return ""
    text = _DISALLOWED_CHARS.sub('', text)
    return _WHITESPACE_PATTERN.sub(' ', text)


def ordered_unique(items):
    """Remove duplicates, keeping the first occurrence of each item."""
    return list(dict.fromkeys(items))


# ============================================================================
# AIRPORT CODE STRATEGIES
# ============================================================================

MIN_AIRPORTS = 2

_PARENTHETICAL_PATTERN = re.compile(r'\(([A-Z]{3})\)')
_DIRECT_PAIR_PATTERN = re.compile(r'([A-Z]{3})(?:-| to )([A-Z]{3})')


def _parenthetical_codes(text):
    return _PARENTHETICAL_PATTERN.findall(text)


def _direct_pair_codes(text):
    codes = []
    for origin, dest in _DIRECT_PAIR_PATTERN.findall(text):
        codes.extend([origin, dest])
    return codes


def _build_name_lookup():
    # Names are matched against sanitized text, so sanitize them the same way
    lookup = {}
    for name, code in AIRPORT_NAME_TO_IATA.items():
        key = sanitize_text(name).strip().lower()
        if key:
            lookup.setdefault(key, code)
    if not lookup:
        return lookup, None
    # Longest first so "london heathrow" is preferred over "london"
    names = sorted(lookup, key=len, reverse=True)
    pattern = re.compile(
        r'\b(' + '|'.join(re.escape(name) for name in names) + r')\b',
        re.IGNORECASE
    )
    return lookup, pattern


_NAME_LOOKUP, _NAME_PATTERN = _build_name_lookup()


def _named_airport_codes(text):
    if _NAME_PATTERN is None:
        return []
    return [_NAME_LOOKUP[m.group(1).lower()] for m in _NAME_PATTERN.finditer(text)]


AIRPORT_STRATEGIES = (
    _parenthetical_codes,
    _direct_pair_codes,
    _named_airport_codes,
)


def extract_airports(text):
    """Find departure/arrival airport codes in sanitized text.

    Returns:
        List of IATA codes in order of appearance, or an empty list if
        fewer than two valid codes were found.
    """
    candidates = []
    for strategy in AIRPORT_STRATEGIES:
        found = strategy(text)
        if len(found) >= MIN_AIRPORTS:
            logger.debug("  -> %s matched %s", strategy.__name__, found)
            candidates = found
            break

    valid = ordered_unique(code for code in candidates if is_valid_airport(code))
    if len(valid) < MIN_AIRPORTS:
        return []
    return valid


# ============================================================================
# FIXED PATTERNS
# ============================================================================

DATE_PATTERN = re.compile(
    r'\b(\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|\d{1,2} [A-Za-z]{3,9} \d{4})\b',
    re.IGNORECASE
)
TIME_PATTERN = re.compile(r'\b(\d{1,2}:\d{2}(?: ?[APMapm]{2})?)\b', re.IGNORECASE)
# Two letters, optional letter/digit, optional space, 1-4 digits: "EI 154", "AA123"
FLIGHT_NUMBER_PATTERN = re.compile(r'\b([A-Z]{2}[A-Z0-9]? ?\d{1,4})\b')
BOOKING_REF_PATTERN = re.compile(
    r'(?:booking reference|PNR|confirmation no|ref|reservation no):? *\b([A-Z0-9]{6,8})\b',
    re.IGNORECASE
)


def extract_flight_info(text):
    """Extract candidate flight facts from raw message text.

    Args:
        text: Subject and body joined by a newline

    Returns:
        FlightInfo with deduplicated iatas, dates, times, flight_numbers
        and booking_refs
    """
    sanitized = sanitize_text(text)

    info = FlightInfo(
        iatas=extract_airports(sanitized),
        dates=ordered_unique(DATE_PATTERN.findall(sanitized)),
        times=ordered_unique(TIME_PATTERN.findall(sanitized)),
        flight_numbers=ordered_unique(FLIGHT_NUMBER_PATTERN.findall(sanitized)),
        booking_refs=ordered_unique(BOOKING_REF_PATTERN.findall(sanitized)),
    )
    logger.debug(
        "  -> airports=%s dates=%s times=%s flights=%s refs=%s",
        info.iatas, info.dates, info.times, info.flight_numbers, info.booking_refs
    )
    return info
