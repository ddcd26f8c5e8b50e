"""
Output of merged flights as CSV, JSON or a month-grouped report.

The CSV uses the column layout of Flighty's flight import file, so the
output can be imported into the app directly.
"""

import csv
import io
import json
import logging
from datetime import datetime, time as dt_time
from pathlib import Path

from dateutil import parser as dateutil_parser

from .airlines import get_airline_for_flight_number
from .pdf_report import generate_pdf_report, generate_text_report

logger = logging.getLogger(__name__)

FORMATS = ("csv", "json", "pdf")
DESTINATIONS = ("console", "file", "both")

CSV_HEADERS = [
    "Date", "Flight number", "From", "To", "Dep time", "Arr time", "Duration",
    "Airline", "Aircraft", "Registration", "Seat number", "Seat type",
    "Flight class", "Flight reason", "Note", "Message IDs", "Dep_id", "Arr_id",
    "Airline_id", "Aircraft_id", "Booking Reference",
]


def format_date(value):
    """Normalize a date string from an email to YYYY-MM-DD ("" if unparseable)."""
    if not value:
        return ""
    try:
        return dateutil_parser.parse(value).strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        return ""


def format_time(value):
    """Normalize a time like "1:05 PM" or "13:05" to HH:MM:SS ("00:00:00" if unparseable)."""
    if not value:
        return "00:00:00"
    try:
        parsed = dateutil_parser.parse(value, default=datetime.combine(datetime.min.date(), dt_time()))
    except (ValueError, OverflowError):
        return "00:00:00"
    return parsed.strftime("%H:%M:%S")


def _csv_row(flight):
    row = dict.fromkeys(CSV_HEADERS, "")
    row.update({
        "Date": format_date(flight.date),
        "Flight number": flight.flight_number,
        "From": flight.departure_iata,
        "To": flight.arrival_iata,
        "Dep time": format_time(flight.time),
        "Airline": get_airline_for_flight_number(flight.flight_number),
        "Note": flight.subject,
        "Message IDs": ",".join(flight.message_ids),
        "Booking Reference": ",".join(flight.booking_refs),
    })
    return [row[header] for header in CSV_HEADERS]


def flights_to_csv(flights):
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for flight in flights:
        writer.writerow(_csv_row(flight))
    return output.getvalue()


def flights_to_json(flights):
    return json.dumps([flight.to_dict() for flight in flights], indent=2)


def output_filename(fmt, now=None):
    """File name like planemail_2024_05_01_14_30.csv."""
    now = now or datetime.now()
    return f"planemail_{now.strftime('%Y_%m_%d_%H_%M')}.{fmt}"


def export_flights(flights, fmt="csv", destination="console", output_dir="."):
    """Print and/or save the merged flights.

    Args:
        flights: List of FlightEntity
        fmt: "csv", "json" or "pdf"
        destination: "console", "file" or "both"
        output_dir: Directory for saved files

    Returns:
        Path of the saved file, or None if nothing was saved
    """
    fmt = fmt.lower()
    destination = destination.lower()
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format: {fmt}")
    if destination not in DESTINATIONS:
        raise ValueError(f"Unknown destination: {destination}")

    if fmt == "csv":
        output_data = flights_to_csv(flights)
    elif fmt == "json":
        output_data = flights_to_json(flights)
    else:
        output_data = generate_text_report(flights)

    if destination in ("console", "both"):
        print(output_data)

    if destination not in ("file", "both"):
        return None

    path = Path(output_dir) / output_filename(fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "pdf":
        path = generate_pdf_report(flights, path)
    else:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(output_data)
    print(f"Data saved to {path}")
    logger.debug("Wrote %d flight(s) to %s", len(flights), path)
    return path
