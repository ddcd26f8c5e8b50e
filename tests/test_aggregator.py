from planemail.aggregator import FlightAggregator, aggregate_flights
from planemail.models import ExtractionRecord


def record(message_id, iatas=("DUB", "LHR"), dates=("2024-05-01",), times=("14:30",),
           flight_numbers=("EI 154",), booking_refs=(), subject="Your flight", account=""):
    return ExtractionRecord(
        message_id=message_id,
        subject=subject,
        iatas=list(iatas),
        dates=list(dates),
        times=list(times),
        flight_numbers=list(flight_numbers),
        booking_refs=list(booking_refs),
        account=account,
    )


def test_same_flight_is_merged():
    flights = aggregate_flights([("a", [
        record("m1", booking_refs=["AB12CD"]),
        record("m2", booking_refs=["AB12CD", "ZX98YW"], subject="Check in now"),
    ])])

    assert len(flights) == 1
    flight = flights[0]
    assert flight.message_ids == ["m1", "m2"]
    assert flight.booking_refs == ["AB12CD", "ZX98YW"]
    assert flight.subject == "Your flight"
    assert flight.key == "DUB|LHR|2024-05-01|14:30|EI 154"


def test_different_time_is_a_different_flight():
    flights = aggregate_flights([("a", [record("m1"), record("m2", times=["18:05"])])])
    assert [f.time for f in flights] == ["14:30", "18:05"]


def test_missing_time_gives_empty_time():
    [flight] = aggregate_flights([("a", [record("m1", times=[])])])
    assert flight.time == ""
    assert flight.key == "DUB|LHR|2024-05-01||EI 154"


def test_only_first_values_decide_identity():
    flights = aggregate_flights([("a", [
        record("m1", iatas=["DUB", "LHR", "JFK"], dates=["2024-05-01", "2024-05-08"]),
        record("m2"),
    ])])
    assert len(flights) == 1
    assert flights[0].arrival_iata == "LHR"


def test_incomplete_records_are_discarded():
    aggregator = FlightAggregator()
    assert aggregator.add(record("m1", flight_numbers=[])) is None
    assert aggregator.add(record("m2", dates=[])) is None
    assert aggregator.add(record("m3", iatas=["DUB"])) is None
    assert len(aggregator) == 0
    assert aggregator.flights == []


def test_first_account_wins_across_accounts():
    flights = aggregate_flights([
        ("first@example.com", [record("m1", subject="From first")]),
        ("second@example.com", [record("x9", subject="From second"),
                                record("x10", flight_numbers=["BA117"], subject="From second")]),
    ])
    assert [f.subject for f in flights] == ["From first", "From second"]
    assert flights[0].message_ids == ["m1", "x9"]
    assert flights[1].flight_number == "BA117"


def test_duplicate_refs_in_one_record_collapse():
    [flight] = aggregate_flights([("a", [record("m1", booking_refs=["AB12CD", "AB12CD"])])])
    assert flight.booking_refs == ["AB12CD"]


def test_to_dict():
    [flight] = aggregate_flights([("a", [record("m1", booking_refs=["AB12CD"])])])
    assert flight.to_dict() == {
        "subject": "Your flight",
        "departureIata": "DUB",
        "arrivalIata": "LHR",
        "date": "2024-05-01",
        "time": "14:30",
        "flightNumber": "EI 154",
        "bookingRefs": ["AB12CD"],
        "messageIds": ["m1"],
    }


def test_no_streams():
    assert aggregate_flights([]) == []
