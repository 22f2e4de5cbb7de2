# db/services.py

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db.database import SessionLocal
from db.models import AiMessage
from logger import setup_logger
from models.schema import LlmMessage

logger = setup_logger("db.services")


class DuplicateSessionError(ValueError):
    pass


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _is_duplicate_session(error: IntegrityError) -> bool:
    # 23505 is unique_violation on PostgreSQL; SQLite only reports it in the message
    detail = str(error.orig)
    is_unique = getattr(error.orig, "pgcode", None) == "23505" or "UNIQUE constraint failed" in detail
    return is_unique and "session_uuid" in detail


def to_llm_message(row: AiMessage) -> LlmMessage:
    return LlmMessage(
        id=row.id,
        session_uuid=row.session_uuid,
        prompt_template=row.prompt_template,
        prompt_template_category=row.prompt_template_category,
        context=row.context,
        prompt=row.prompt,
        message=row.message,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def save_llm_message(msg: LlmMessage) -> LlmMessage:
    """Insert a message and return it with the id assigned by the database."""
    session: Session = SessionLocal()
    try:
        row = AiMessage(
            session_uuid=msg.session_uuid,
            prompt_template=msg.prompt_template,
            prompt_template_category=msg.prompt_template_category.value,
            context=msg.context,
            prompt=msg.prompt,
            message=msg.message,
            created_at=msg.created_at,
            updated_at=msg.updated_at,
        )
        session.add(row)
        session.commit()
        session.refresh(row)
        return to_llm_message(row)
    except IntegrityError as e:
        session.rollback()
        if _is_duplicate_session(e):
            raise DuplicateSessionError(f"Session {msg.session_uuid} already has a message") from e
        logger.error(f"Failed to save message to database: {e}")
        raise
    except SQLAlchemyError as e:
        logger.error(f"Failed to save message to database: {e}")
        session.rollback()
        raise
    finally:
        session.close()


def load_llm_message(session_uuid: str) -> Optional[LlmMessage]:
    session: Session = SessionLocal()
    try:
        row = session.query(AiMessage).filter(
            AiMessage.session_uuid == session_uuid
        ).one_or_none()

        return to_llm_message(row) if row else None
    finally:
        session.close()


def list_llm_messages(category: Optional[str] = None, page: int = 1, page_size: int = 10) -> Tuple[List[LlmMessage], int]:
    """Return one page of messages, newest first, and the total count."""
    session: Session = SessionLocal()
    try:
        query = session.query(AiMessage)
        if category:
            query = query.filter(AiMessage.prompt_template_category == category)

        total = query.with_entities(func.count(AiMessage.id)).scalar()
        rows = query.order_by(
            AiMessage.created_at.desc(), AiMessage.id.desc()
        ).offset((page - 1) * page_size).limit(page_size).all()

        return [to_llm_message(row) for row in rows], total
    finally:
        session.close()


def update_llm_message_answer(session_uuid: str, message: str) -> Optional[LlmMessage]:
    session: Session = SessionLocal()
    try:
        row = session.query(AiMessage).filter(
            AiMessage.session_uuid == session_uuid
        ).one_or_none()
        if row is None:
            return None

        row.message = message
        row.updated_at = datetime.now(timezone.utc)
        session.commit()
        session.refresh(row)
        return to_llm_message(row)
    except SQLAlchemyError as e:
        logger.error(f"Failed to update message {session_uuid}: {e}")
        session.rollback()
        raise
    finally:
        session.close()
