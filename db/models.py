# db/models.py

from sqlalchemy import BigInteger, Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from db.database import Base

class AiMessage(Base):
    """Messages generated by the AI system (ChatGPT, BioBERT, etc.)."""
    __tablename__ = "biomedgps_ai_message"

    # BIGSERIAL on PostgreSQL; SQLite only autoincrements INTEGER primary keys
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    session_uuid = Column(String(64), nullable=False, unique=True)
    prompt_template = Column(Text, nullable=False)
    prompt_template_category = Column(String(64), nullable=False)
    context = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    prompt = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
