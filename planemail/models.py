"""
Data records passed between the scanner, the aggregator and the exporters.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class Account:
    """A connected Gmail account and its stored OAuth credentials."""
    email: str
    credentials: dict = field(default_factory=dict)


@dataclass
class ExtractionRecord:
    """Flight facts pulled out of one matching message."""
    message_id: str
    subject: str
    iatas: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    times: List[str] = field(default_factory=list)
    flight_numbers: List[str] = field(default_factory=list)
    booking_refs: List[str] = field(default_factory=list)
    account: str = ""

    def qualifies(self):
        """True if the record carries enough evidence to describe a flight."""
        return len(self.iatas) >= 2 and bool(self.dates) and bool(self.flight_numbers)


@dataclass
class FlightEntity:
    """One physical flight, merged from every message that mentions it."""
    departure_iata: str
    arrival_iata: str
    date: str
    time: str
    flight_number: str
    subject: str
    booking_refs: List[str] = field(default_factory=list)
    message_ids: List[str] = field(default_factory=list)

    @property
    def key(self):
        return flight_key(self.departure_iata, self.arrival_iata, self.date,
                          self.time, self.flight_number)

    def to_dict(self):
        return {
            "subject": self.subject,
            "departureIata": self.departure_iata,
            "arrivalIata": self.arrival_iata,
            "date": self.date,
            "time": self.time,
            "flightNumber": self.flight_number,
            "bookingRefs": list(self.booking_refs),
            "messageIds": list(self.message_ids),
        }


def flight_key(departure, arrival, date, time, flight_number):
    """Identity key shared by every mention of the same flight."""
    return "|".join([departure, arrival, date, time, flight_number])
