"""Projection of readings to map coordinates."""

from collections.abc import Iterable

from coldchain.services.records import Coordinate, TelemetryReading


def extract_coordinates(readings: Iterable[TelemetryReading]) -> list[Coordinate]:
    """Project readings to (ts, lat, lng, alt), dropping unlocated ones.

    ``latitude``/``longitude`` fall back to the legacy ``lat``/``lng`` columns;
    altitude defaults to 0. Input order is preserved.
    """
    coordinates: list[Coordinate] = []
    for reading in readings:
        lat = reading.resolved_latitude
        lng = reading.resolved_longitude
        if lat is None or lng is None:
            continue
        coordinates.append(
            Coordinate(ts=reading.timestamp, lat=lat, lng=lng, alt=reading.resolved_altitude)
        )
    return coordinates
