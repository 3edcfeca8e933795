"""
Database Seed Script

Creates the tables and inserts the standard vendors and menus.
Existing rows with the same ids are left untouched.
Run: python -m foodcourt.seed (or the foodcourt-seed console script)
"""

import asyncio
import logging
import sys

from sqlalchemy import select

from foodcourt.core.config import get_settings, setup_logging
from foodcourt.database import DataStore
from foodcourt.models import MenuItem, Vendor
from foodcourt.repositories.mock import SEED_MENU_ITEMS, SEED_VENDORS

logger = logging.getLogger("foodcourt.seed")


async def seed(store: DataStore) -> int:
    """
    Insert missing seed vendors and menu items.

    Returns:
        Number of rows inserted
    """
    await store.init_schema()
    inserted = 0

    async with store.session() as db:
        existing_vendors = set((await db.execute(select(Vendor.id))).scalars().all())
        existing_items = set((await db.execute(select(MenuItem.id))).scalars().all())

        for vendor in SEED_VENDORS:
            if vendor["id"] not in existing_vendors:
                db.add(Vendor(is_active=True, **vendor))
                inserted += 1
        await db.flush()

        for vendor_id, items in SEED_MENU_ITEMS.items():
            for item in items:
                if item["id"] not in existing_items:
                    db.add(MenuItem(vendor_id=vendor_id, is_available=True, **item))
                    inserted += 1

        await db.commit()

    return inserted


async def _main() -> int:
    settings = get_settings()
    setup_logging(settings=settings)
    store = DataStore(settings)

    try:
        if not await store.connect():
            logger.error("Cannot seed: database unreachable")
            return 1
        inserted = await seed(store)
        logger.info(f"✅ Seed complete, {inserted} rows inserted")
        return 0
    finally:
        await store.dispose()


def run() -> None:
    """Console entry point."""
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    run()
