import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INIT_DB"] = "false"
os.environ.setdefault("OPENAI_API_KEY", "test-key")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tests.fakes import FEVER, IBUPROFEN, FakeChatBot


@pytest.fixture
def entity():
    return dict(IBUPROFEN)


@pytest.fixture
def expanded_relation():
    return {
        "relation": {
            "relation_type": "DRUGBANK::treats::Compound:Disease",
            "source_id": IBUPROFEN["id"],
            "source_type": IBUPROFEN["label"],
            "target_id": FEVER["id"],
            "target_type": FEVER["label"],
            "resource": "DrugBank",
        },
        "source": dict(IBUPROFEN),
        "target": dict(FEVER),
    }


@pytest.fixture
def db_engine(monkeypatch):
    import db.services
    from db.database import init_db

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    monkeypatch.setattr(
        db.services, "SessionLocal",
        sessionmaker(autocommit=False, autoflush=False, bind=engine),
    )
    yield engine
    engine.dispose()


@pytest.fixture
def chatbot(monkeypatch):
    import agents.services

    bot = FakeChatBot()
    monkeypatch.setattr(agents.services, "get_chatbot", lambda: bot)
    return bot
