"""Cold chain telemetry API."""

__version__ = "1.0.0"
