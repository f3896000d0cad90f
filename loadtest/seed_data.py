#!/usr/bin/env python3
"""Seed test data for load testing.

Creates:
- Sensor configurations (every other sensor, so both paths are exercised)
- Seven days of readings per sensor, one every two minutes
- Door open/close events

Run this script BEFORE load tests. The sensor MACs match locustfile.py.
"""

import asyncio
import os
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add backend to Python path
backend_path = Path(__file__).parent.parent / "src" / "backend"
sys.path.insert(0, str(backend_path))

from sqlalchemy.ext.asyncio import AsyncSession

from coldchain.core.config import get_settings
from coldchain.core.deps import build_engine, build_session_factory
from coldchain.models import Base, DoorLog, SensorConfigRow, TelemetryLog

SENSOR_COUNT = int(os.getenv("SEED_SENSORS", "50"))
GATEWAYS = ["GW-CD-01", "GW-CD-02", "GW-LOJA-01"]
DAYS = 7
READING_INTERVAL = timedelta(minutes=2)

# Sao Paulo distribution center
BASE_LAT = -23.5505
BASE_LNG = -46.6333


def sensor_mac(index: int) -> str:
    return "AA:BB:CC:{:02X}:{:02X}:{:02X}".format(
        (index >> 16) & 0xFF, (index >> 8) & 0xFF, index & 0xFF
    )


async def create_sensor_configs(session: AsyncSession) -> int:
    """Configure every other sensor."""
    count = 0
    for i in range(1, SENSOR_COUNT + 1, 2):
        freezer = i % 3 == 0
        session.add(
            SensorConfigRow(
                device_id=sensor_mac(i),
                display_name=f"{'Freezer' if freezer else 'Câmara Fria'} {i:02d}",
                battery_warning_pct=20,
                temp_min=-25 if freezer else 0,
                temp_max=-15 if freezer else 8,
                humidity_min=30,
                humidity_max=90,
                maintenance_mode=i % 10 == 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        count += 1
    await session.flush()
    return count


async def create_readings(session: AsyncSession, start: datetime, end: datetime) -> int:
    """One reading per sensor every READING_INTERVAL."""
    count = 0
    for i in range(1, SENSOR_COUNT + 1):
        mac = sensor_mac(i)
        gateway = GATEWAYS[i % len(GATEWAYS)]
        setpoint = -20.0 if i % 3 == 0 else 4.0
        battery = random.uniform(40, 100)
        ts = start
        while ts <= end:
            session.add(
                TelemetryLog(
                    gateway_id=gateway,
                    device_id=mac,
                    timestamp=ts,
                    temperature=round(setpoint + random.gauss(0, 1.5), 2),
                    humidity=round(random.uniform(45, 85), 1),
                    battery_pct=round(battery, 1),
                    signal_strength=random.randint(-95, -55),
                    latitude=BASE_LAT + i * 0.0001,
                    longitude=BASE_LNG + i * 0.0001,
                )
            )
            battery = max(battery - 0.001, 0)
            ts += READING_INTERVAL
            count += 1
        await session.flush()
        print(f"  {mac}: readings seeded")
    return count


async def create_door_events(session: AsyncSession, start: datetime, end: datetime) -> int:
    """A few door openings per sensor per day, each closed some minutes later."""
    count = 0
    for i in range(1, SENSOR_COUNT + 1):
        mac = sensor_mac(i)
        day = start
        while day < end:
            for _ in range(random.randint(2, 6)):
                opened = day + timedelta(minutes=random.randint(0, 24 * 60 - 30))
                session.add(DoorLog(device_id=mac, is_open=True, observed_at=opened))
                session.add(
                    DoorLog(
                        device_id=mac,
                        is_open=False,
                        observed_at=opened + timedelta(minutes=random.randint(1, 20)),
                    )
                )
                count += 2
            day += timedelta(days=1)
    await session.flush()
    return count


async def main():
    """Main seeding function."""
    print("\n" + "="*80)
    print("Cold Chain Load Test Data Seeding")
    print("="*80 + "\n")

    settings = get_settings()
    engine = build_engine(settings)
    async_session = build_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    end = datetime.now(timezone.utc)
    start = end - timedelta(days=DAYS)

    async with async_session() as session:
        try:
            print("Creating sensor configurations...")
            configs = await create_sensor_configs(session)

            print("Creating readings...")
            readings = await create_readings(session, start, end)

            print("Creating door events...")
            doors = await create_door_events(session, start, end)

            await session.commit()

            print("\n" + "="*80)
            print("Seeding Complete!")
            print("="*80)
            print(f"Created:")
            print(f"  - {configs} sensor configurations")
            print(f"  - {readings} readings")
            print(f"  - {doors} door events")
            print("="*80 + "\n")

        except Exception as e:
            print(f"\nERROR: {e}")
            await session.rollback()
            raise
        finally:
            await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
