#!/usr/bin/env python3
"""Create the FareWatch tables in a local PostgreSQL for development.

The request/response service owns the production schema; this script builds
the same tables from the ORM models so the fare check can run locally.

Usage:
    python scripts/create_local_tables.py
"""

import sys
from pathlib import Path

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config
from core.db import Base


def build_database_url() -> URL:
    config = get_config()
    return URL.create(
        "postgresql+psycopg",
        username=config.database_user,
        password=config.database_password,
        host=config.database_host,
        port=config.database_port,
        database=config.database_name,
    )


def main():
    """Create all tables that do not exist yet."""
    url = build_database_url()
    print(f"Creating tables at {url.render_as_string(hide_password=True)}...")
    print()

    engine = create_engine(url)
    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(engine)

    for table in Base.metadata.sorted_tables:
        state = "already exists" if table.name in existing else "created"
        print(f"✓ {table.name} {state}")

    engine.dispose()
    print()
    print("✅ All tables ready")


if __name__ == "__main__":
    main()
