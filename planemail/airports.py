"""
Airport reference data.

Valid IATA codes and airport names come from the airportsdata package.
The city and name lookup used to spot airports in free text is built from
the curated list shipped with the package, which names only the main
airport of each city. Everything here is built once at import time and
never modified afterwards.
"""

import logging
from pathlib import Path
from types import MappingProxyType

import airportsdata

logger = logging.getLogger(__name__)

AIRPORT_CODES_FILE = Path(__file__).parent / "airport_codes.txt"

# Extra names people use for airports that the data file lists under a
# different city or airport name
AIRPORT_ALIASES = {
    'heathrow': 'LHR', 'london heathrow': 'LHR',
    'gatwick': 'LGW', 'london gatwick': 'LGW',
    'stansted': 'STN', 'luton': 'LTN',
    'schiphol': 'AMS', 'charles de gaulle': 'CDG', 'orly': 'ORY',
    'logan': 'BOS', 'laguardia': 'LGA', 'la guardia': 'LGA', 'dulles': 'IAD',
    'midway': 'MDW', 'ohare': 'ORD', 'haneda': 'HND', 'narita': 'NRT',
    'changi': 'SIN', 'new york city': 'JFK', 'dallas fort worth': 'DFW',
    'minneapolis st paul': 'MSP', 'salt lake': 'SLC', 'raleigh durham': 'RDU',
}


def load_airport_codes(codes_file=None):
    """Load airport codes, names and cities from the data file.

    Args:
        codes_file: Path to the data file. Defaults to airport_codes.txt.

    Returns:
        Tuple of (codes set, {code: airport name}, {lowercase name or city: code})
    """
    if codes_file is None:
        codes_file = AIRPORT_CODES_FILE

    codes = set()
    names = {}
    lookup = {}

    path = Path(codes_file)
    if path.exists():
        with open(path, 'r', encoding='utf-8', errors='ignore') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                parts = [p.strip() for p in line.split(',')]
                code = parts[0].upper()
                if len(code) != 3 or not code.isalpha():
                    continue
                codes.add(code)
                name = parts[1] if len(parts) > 1 else ""
                city = parts[2] if len(parts) > 2 else ""
                if name:
                    names[code] = name
                    lookup.setdefault(name.lower(), code)
                if city:
                    lookup.setdefault(city.lower(), code)
    else:
        logger.warning("Airport data file not found: %s", path)

    return codes, names, lookup


def _initialize():
    codes, names, lookup = load_airport_codes()

    # Every IATA airport is valid, not only the ones listed in the data file
    for code, airport in airportsdata.load("IATA").items():
        codes.add(code)
        if airport.get("name"):
            names.setdefault(code, airport["name"])

    for alias, code in AIRPORT_ALIASES.items():
        if code in codes:
            lookup.setdefault(alias, code)
    return frozenset(codes), MappingProxyType(names), MappingProxyType(lookup)


# Module-level reference tables
VALID_IATA_CODES, AIRPORT_NAMES, AIRPORT_NAME_TO_IATA = _initialize()


def is_valid_airport(code):
    """Check if a code is a known IATA airport code."""
    return code in VALID_IATA_CODES


def get_airport_display(code):
    """Get display string for airport code.

    Args:
        code: 3-letter IATA airport code

    Returns:
        Formatted string like "DUB (Dublin)" or just "XYZ" if unknown
    """
    name = AIRPORT_NAMES.get(code, "")
    if name:
        short_name = name.replace(" International Airport", "").replace(" Airport", "")
        short_name = short_name.replace(" International", "")
        if len(short_name) > 25:
            short_name = short_name[:22] + "..."
        return f"{code} ({short_name})"
    return code
