"""
Flight summary reports.

Lists flights grouped by month, as a PDF (reportlab) or as plain text.
"""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path

from dateutil import parser as dateutil_parser
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from .airports import get_airport_display

logger = logging.getLogger(__name__)

_UNKNOWN_DATE = (9999, 0, "Unknown", 0)


def parse_date_components(date_str):
    """Split a date string like '2024-05-01' or '1 May 2024' into parts.

    Returns:
        Tuple of (year, month_num, month_name, day)
    """
    if not date_str:
        return _UNKNOWN_DATE
    try:
        dt = dateutil_parser.parse(date_str)
    except (ValueError, OverflowError):
        return _UNKNOWN_DATE
    return (dt.year, dt.month, dt.strftime("%B"), dt.day)


def group_flights_by_month(flights):
    """Group flights by month, oldest month first, sorted by day within a month.

    Returns:
        Dict of (year, month_num, month_name) -> list of FlightEntity
    """
    grouped = defaultdict(list)
    for flight in flights:
        year, month_num, month_name, day = parse_date_components(flight.date)
        grouped[(year, month_num, month_name)].append((day, flight))

    return {
        key: [flight for _, flight in sorted(items, key=lambda item: item[0])]
        for key, items in sorted(grouped.items())
    }


def format_route(flight, display_names=False):
    if display_names:
        return f"{get_airport_display(flight.departure_iata)} -> {get_airport_display(flight.arrival_iata)}"
    return f"{flight.departure_iata} -> {flight.arrival_iata}"


def generate_text_report(flights, title="Flight Summary"):
    """Render flights grouped by month as plain text."""
    lines = []
    lines.append("=" * 70)
    lines.append(f"  {title}")
    lines.append("=" * 70)
    lines.append(f"  Generated: {datetime.now().strftime('%B %d, %Y at %I:%M %p')}")
    lines.append(f"  Total Flights: {len(flights)}")
    lines.append("")

    for (year, _, month_name), month_flights in group_flights_by_month(flights).items():
        lines.append("")
        header = "UNKNOWN DATE" if year == 9999 else f"{month_name.upper()} {year}"
        lines.append(f"  {header}  ({len(month_flights)} flights)")
        lines.append("-" * 70)

        for flight in month_flights:
            refs = ", ".join(flight.booking_refs) or "------"
            lines.append(f"  {flight.flight_number:<9} {format_route(flight, display_names=True)}")
            lines.append(f"             Date: {flight.date} {flight.time}".rstrip())
            lines.append(f"             Booking: {refs}")
            lines.append("")

    lines.append("=" * 70)
    return "\n".join(lines)


def write_text_report(flights, output_path, title="Flight Summary"):
    """Write the text report to a file.

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(generate_text_report(flights, title))
    return output_path


_TABLE_STYLE = TableStyle([
    ('FONT', (0, 0), (-1, 0), 'Helvetica-Bold', 9),
    ('FONT', (0, 1), (-1, -1), 'Helvetica', 9),
    ('LINEBELOW', (0, 0), (-1, 0), 1, colors.grey),
    ('VALIGN', (0, 0), (-1, -1), 'TOP'),
])
_COLUMN_WIDTHS = [1.1 * inch, 0.8 * inch, 0.8 * inch, 1.4 * inch, 2.0 * inch]


def _month_table(month_flights):
    rows = [['Date', 'Time', 'Flight', 'Route', 'Booking']]
    rows.extend(
        [f.date, f.time, f.flight_number, format_route(f), ", ".join(f.booking_refs)]
        for f in month_flights
    )
    table = Table(rows, colWidths=_COLUMN_WIDTHS, hAlign='LEFT')
    table.setStyle(_TABLE_STYLE)
    return table


def generate_pdf_report(flights, output_path, title="Flight Summary"):
    """Generate a PDF report of flights grouped by month.

    Falls back to a text report next to output_path if the PDF cannot be built.

    Returns:
        Path to the generated file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    styles = getSampleStyleSheet()
    story = [
        Paragraph(title, styles['Title']),
        Paragraph(f"{len(flights)} flights", styles['Normal']),
        Spacer(1, 0.3 * inch),
    ]
    for (year, _, month_name), month_flights in group_flights_by_month(flights).items():
        header = "Unknown date" if year == 9999 else f"{month_name} {year}"
        story.append(Paragraph(header, styles['Heading2']))
        story.append(_month_table(month_flights))
        story.append(Spacer(1, 0.2 * inch))

    doc = SimpleDocTemplate(str(output_path), pagesize=letter,
                            leftMargin=0.5 * inch, rightMargin=0.5 * inch)
    try:
        doc.build(story)
        return output_path
    except Exception as e:
        logger.warning("Error generating PDF (%s), writing text report instead", e)
        return write_text_report(flights, output_path.with_suffix('.txt'), title)
