"""Telemetry log model (append-only sensor readings)."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from coldchain.models.base import Base


class TelemetryLog(Base):
    """One sampling event reported by a sensor through a gateway.

    Column names follow the table written by the ingestion pipeline; the
    attribute names are the ones used throughout the services.
    """

    __tablename__ = "telemetry_logs"
    __table_args__ = (Index("ix_telemetry_logs_mac_ts", "mac", "ts"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    gateway_id: Mapped[str] = mapped_column("gw", String(64), nullable=False)
    device_id: Mapped[str] = mapped_column("mac", String(17), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column("ts", DateTime(timezone=True), nullable=False)

    temperature: Mapped[float | None] = mapped_column("temp", Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column("hum", Float, nullable=True)
    battery_pct: Mapped[float | None] = mapped_column("batt", Float, nullable=True)
    signal_strength: Mapped[float | None] = mapped_column("rssi", Float, nullable=True)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    altitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Legacy location columns written by older gateway firmware
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<TelemetryLog(mac={self.device_id}, gw={self.gateway_id}, ts={self.timestamp})>"
