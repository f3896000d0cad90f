"""Door log model (virtual door events inferred from temperature spikes)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from coldchain.models.base import Base


class DoorLog(Base):
    """Open/closed transition inferred upstream for a telemetry sensor."""

    __tablename__ = "door_logs"
    __table_args__ = (Index("ix_door_logs_mac_ts", "sensor_mac", "timestamp_read"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column("sensor_mac", String(17), nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False)
    observed_at: Mapped[datetime] = mapped_column(
        "timestamp_read", DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        return f"<DoorLog(mac={self.device_id}, open={self.is_open}, at={self.observed_at})>"
