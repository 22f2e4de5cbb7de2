# db/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from config import Config

engine = create_engine(Config.DATABASE_URL, echo=Config.SQL_ECHO, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create the tables that don't exist yet (CREATE TABLE IF NOT EXISTS semantics)."""
    # Registers the models on Base.metadata
    from db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
