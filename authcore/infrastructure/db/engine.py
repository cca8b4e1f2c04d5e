from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


@lru_cache(maxsize=4)
def get_engine(dsn: str):
    return create_engine(dsn, future=True, pool_pre_ping=True)


def init_schema(engine) -> None:
    from authcore.infrastructure.db.models import accounts  # noqa: F401  registers tables

    Base.metadata.create_all(engine)
    logger.info("db_engine: schema_initialized tables=%s", ",".join(sorted(Base.metadata.tables)))
