import json
import sys

import atheris

with atheris.instrument_imports():
    from epdcal.api_client import PayloadFailure, parse_battery_payload, parse_events_payload
    from epdcal.occurrences import date_key, index_occurrences, parse_instant


def TestOneInput(data: bytes) -> None:
    """Fuzz events/battery payload parsing and DateKey derivation."""
    text = data.decode("utf-8", errors="ignore")

    # Timestamp parser returns None for invalid input, never raises
    instant = parse_instant(text)
    date_key(instant)

    try:
        payload = json.loads(text)
    except ValueError:
        return

    try:
        events = parse_events_payload(payload)
    except PayloadFailure:
        pass  # Expected for malformed payloads
    else:
        index_occurrences(events.occurrences)

    try:
        parse_battery_payload(payload)
    except PayloadFailure:
        pass  # Expected for malformed payloads


def main() -> None:
    atheris.Setup(sys.argv, TestOneInput)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
