#!/usr/bin/env python3
"""Create the cold chain tables.

Run this script inside the backend container:
    docker exec -it coldchain-backend python scripts/init_db.py

Existing tables are left untouched.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from coldchain.core.config import get_settings
from coldchain.core.deps import build_engine
from coldchain.models import Base


async def init_db():
    """Create missing tables and indexes."""
    settings = get_settings()
    print(f"🔄 Connecting to database...")

    engine = build_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()

    for table in Base.metadata.sorted_tables:
        print(f"✅ {table.name}")
    print("\n🎉 Database initialization complete!")


if __name__ == "__main__":
    asyncio.run(init_db())
