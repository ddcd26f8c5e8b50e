"""
Merging of per-message extraction records into unique flights.

Several emails usually describe the same flight (booking confirmation,
check-in reminder, boarding pass). Records are merged when departure,
arrival, date, time and flight number all match. The first record seen for
a flight decides its subject; later ones only add message ids and booking
references.
"""

import logging

from .models import FlightEntity, flight_key

logger = logging.getLogger(__name__)


class FlightAggregator:
    """Accumulates records into FlightEntity objects keyed by flight identity."""

    def __init__(self):
        self._flights = {}

    def add(self, record):
        """Merge one record.

        Returns:
            The entity the record was merged into, or None if the record
            lacks a departure, arrival, date or flight number.
        """
        if len(record.iatas) < 2 or not record.dates or not record.flight_numbers:
            logger.debug("Discarding %s: incomplete flight details", record.message_id)
            return None

        departure, arrival = record.iatas[0], record.iatas[1]
        date = record.dates[0]
        time = record.times[0] if record.times else ""
        flight_number = record.flight_numbers[0]
        key = flight_key(departure, arrival, date, time, flight_number)

        flight = self._flights.get(key)
        if flight:
            flight.message_ids.append(record.message_id)
            for ref in record.booking_refs:
                if ref not in flight.booking_refs:
                    flight.booking_refs.append(ref)
            logger.debug("Merged %s into %s", record.message_id, key)
            return flight

        flight = FlightEntity(
            departure_iata=departure,
            arrival_iata=arrival,
            date=date,
            time=time,
            flight_number=flight_number,
            subject=record.subject,
            booking_refs=list(dict.fromkeys(record.booking_refs)),
            message_ids=[record.message_id],
        )
        self._flights[key] = flight
        logger.debug("New flight %s from %s", key, record.message_id)
        return flight

    def add_all(self, records):
        for record in records:
            self.add(record)

    @property
    def flights(self):
        """Merged flights in the order they were first seen."""
        return list(self._flights.values())

    def __len__(self):
        return len(self._flights)


def aggregate_flights(record_streams):
    """Merge record streams from several accounts.

    Args:
        record_streams: Iterable of (account, records) pairs, processed in order

    Returns:
        List of FlightEntity
    """
    aggregator = FlightAggregator()
    for account, records in record_streams:
        before = len(aggregator)
        aggregator.add_all(records)
        logger.info("%s: %d new flight(s)", account or "account", len(aggregator) - before)
    return aggregator.flights
