#!/usr/bin/env python3
"""Give every project stored without level labels the default level config."""

import logging

from app.core.settings import settings
from app.db.session import get_sessionmaker, init_engine
from app.services.projects import ProjectService


def main():
    logging.basicConfig(level=logging.INFO)
    init_engine(settings.database_url)
    db = get_sessionmaker()()
    try:
        count = ProjectService(db).backfill_level_configs()
    finally:
        db.close()
    print(f"Backfilled {count} project(s)")


if __name__ == "__main__":
    main()
