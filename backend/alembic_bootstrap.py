#!/usr/bin/env python3
"""Alembic bootstrap for databases created with Base.metadata.create_all.

If the stockroom tables already exist but alembic_version is missing,
stamp the initial revision so that later upgrades apply cleanly.
"""

from __future__ import annotations

import logging
import os
import subprocess

from sqlalchemy import inspect

from stockroom.database import engine

logger = logging.getLogger("stockroom.alembic_bootstrap")

BASELINE_REVISION = os.getenv("ALEMBIC_BASELINE_REVISION", "001")
STOCKROOM_TABLES = ("users", "products", "stock_requests", "notifications")


def needs_baseline_stamp(inspector) -> bool:
    if inspector.has_table("alembic_version"):
        return False
    return all(inspector.has_table(table) for table in STOCKROOM_TABLES)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if needs_baseline_stamp(inspect(engine)):
        logger.info("Stockroom schema found without alembic_version, stamping %s", BASELINE_REVISION)
        subprocess.run(["alembic", "stamp", BASELINE_REVISION], check=True)
    else:
        logger.info("Alembic bootstrap check: no baseline stamp required")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
