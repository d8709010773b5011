# infra/db/base.py
from __future__ import annotations
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
import logging

from infra.path import database_url

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(db_url: str | None = None) -> Engine:
    url = db_url or database_url()
    logger.info("Using database at: %s", url)
    return create_engine(
        url,
        echo=False,
        future=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
