"""
Airline designators, used to name the airline of an extracted flight number.
"""

import re

# IATA airline designator -> airline name
AIRLINE_CODES = {
    # North America
    'AA': 'American Airlines', 'DL': 'Delta', 'UA': 'United', 'WN': 'Southwest',
    'B6': 'JetBlue', 'AS': 'Alaska Airlines', 'NK': 'Spirit', 'F9': 'Frontier',
    'HA': 'Hawaiian Airlines', 'G4': 'Allegiant', 'SY': 'Sun Country',
    'MX': 'Breeze Airways', 'AC': 'Air Canada', 'WS': 'WestJet',
    # Europe
    'BA': 'British Airways', 'LH': 'Lufthansa', 'AF': 'Air France', 'KL': 'KLM',
    'VS': 'Virgin Atlantic', 'IB': 'Iberia', 'AZ': 'ITA Airways', 'SK': 'SAS',
    'AY': 'Finnair', 'LX': 'Swiss', 'OS': 'Austrian', 'TP': 'TAP Portugal',
    'EI': 'Aer Lingus', 'FR': 'Ryanair', 'U2': 'easyJet', 'FI': 'Icelandair',
    'DY': 'Norwegian', 'VY': 'Vueling', 'W6': 'Wizz Air', 'LO': 'LOT',
    # Middle East and Africa
    'EK': 'Emirates', 'EY': 'Etihad', 'QR': 'Qatar Airways', 'TK': 'Turkish Airlines',
    'SV': 'Saudia', 'ET': 'Ethiopian Airlines', 'MS': 'EgyptAir', 'KQ': 'Kenya Airways',
    # Asia and Pacific
    'CX': 'Cathay Pacific', 'SQ': 'Singapore Airlines', 'JL': 'Japan Airlines',
    'NH': 'ANA', 'KE': 'Korean Air', 'OZ': 'Asiana', 'TG': 'Thai Airways',
    'MH': 'Malaysia Airlines', 'BR': 'EVA Air', 'CA': 'Air China',
    'MU': 'China Eastern', 'CZ': 'China Southern', 'AI': 'Air India',
    'QF': 'Qantas', 'VA': 'Virgin Australia', 'NZ': 'Air New Zealand',
    # Latin America
    'AM': 'Aeromexico', 'AV': 'Avianca', 'LA': 'LATAM', 'CM': 'Copa',
    'AD': 'Azul', 'G3': 'GOL', 'Y4': 'Volaris',
}

_DESIGNATOR_PATTERN = re.compile(r'^([A-Z0-9]{2})')


def get_airline_for_flight_number(flight_number):
    """Airline name for a flight number like "EI 154" or "B6123".

    Returns:
        Airline name or empty string if the designator is unknown
    """
    match = _DESIGNATOR_PATTERN.match((flight_number or "").strip().upper())
    if not match:
        return ""
    return AIRLINE_CODES.get(match.group(1), "")
