"""Sensor configuration model (one row per device)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from coldchain.models.base import Base


class SensorConfigRow(Base):
    """Display name, alert thresholds and maintenance flag of a sensor."""

    __tablename__ = "sensor_configs"

    device_id: Mapped[str] = mapped_column("mac", String(17), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    battery_warning_pct: Mapped[float | None] = mapped_column("batt_warning", Float, nullable=True)
    temp_min: Mapped[float | None] = mapped_column(Float, nullable=True)
    temp_max: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity_min: Mapped[float | None] = mapped_column("hum_min", Float, nullable=True)
    humidity_max: Mapped[float | None] = mapped_column("hum_max", Float, nullable=True)
    linked_door_device_id: Mapped[str | None] = mapped_column(
        "sensor_porta_vinculado", String(17), nullable=True
    )
    maintenance_mode: Mapped[bool | None] = mapped_column(
        "em_manutencao", Boolean, nullable=True, default=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<SensorConfigRow(mac={self.device_id}, name={self.display_name})>"
