import pytest

import run
from planemail.config import DEFAULT_SETTINGS
from planemail.errors import AuthExpired
from planemail.models import Account, ExtractionRecord


def test_help(capsys):
    assert run.main(["--help"]) == 0
    assert "--flights" in capsys.readouterr().out


@pytest.mark.parametrize("args,flag,count,expected", [
    (["--dates", "2024-01-01", "2024-02-01"], "--dates", 2, ["2024-01-01", "2024-02-01"]),
    (["--dates", "2024-01-01"], "--dates", 2, None),
    (["--format", "--output", "file"], "--format", 1, None),
    (["--format", "json"], "--format", 1, "json"),
    ([], "--format", 1, None),
])
def test_arg_value(args, flag, count, expected):
    assert run._arg_value(args, flag, count) == expected


def test_flights_rejects_bad_dates(capsys):
    assert run.main(["--flights", "--dates", "2024-01-01", "someday"]) == 1
    assert "Invalid date format" in capsys.readouterr().out


def test_flights_rejects_unknown_format(capsys):
    assert run.main(["--flights", "--format", "xml"]) == 1
    assert "Format must be one of" in capsys.readouterr().out


def test_get_flights_skips_failing_account(monkeypatch, capsys):
    good = ExtractionRecord("m1", "Your flight", ["DUB", "LHR"], ["2024-05-01"], ["14:30"], ["EI 154"], [])

    def scan(mailbox, date_range, account, **kwargs):
        if account == "broken@example.com":
            raise AuthExpired("token revoked")
        return [good]

    monkeypatch.setattr(run, "scan_account", scan)
    ready = [(Account("broken@example.com"), object()), (Account("ok@example.com"), object())]

    flights = run.get_flights(ready, config=dict(DEFAULT_SETTINGS))

    assert [f.flight_number for f in flights] == ["EI 154"]
    out = capsys.readouterr().out
    assert "Skipping broken@example.com" in out
    assert "1 unique flight(s)" in out


def test_get_flights_exports_partial_results_on_interrupt(monkeypatch, capsys):
    good = ExtractionRecord("m1", "Your flight", ["DUB", "LHR"], ["2024-05-01"], [], ["EI 154"], [])

    def scan(mailbox, date_range, account, **kwargs):
        if account == "second@example.com":
            raise KeyboardInterrupt
        return [good]

    monkeypatch.setattr(run, "scan_account", scan)
    ready = [(Account("first@example.com"), object()), (Account("second@example.com"), object())]

    flights = run.get_flights(ready, fmt="json", config=dict(DEFAULT_SETTINGS))

    assert len(flights) == 1
    assert '"flightNumber": "EI 154"' in capsys.readouterr().out
