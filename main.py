# main.py

from contextlib import asynccontextmanager
from typing import List, Optional
import re

from fastapi import FastAPI, HTTPException, Query
from pydantic import ValidationError

from agents.prompts import InvalidPromptTemplateCategory, PROMPT_TEMPLATE, to_category
from agents.services import ChatBotError, answer_llm_message, get_chatbot
from config import Config
from db.database import init_db
from db.services import (
    DuplicateSessionError,
    list_llm_messages,
    load_llm_message,
    update_llm_message_answer,
)
from logger import setup_logger
from models.schema import (
    UUID_PATTERN,
    LlmMessage,
    LlmMessagePage,
    LlmMessageRequest,
    PromptTemplate,
)
from pipeline.graph import build_graph
from pipeline.schema import LlmMessageState

logger = setup_logger("biomedgps")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if Config.INIT_DB:
        init_db()
        logger.info("biomedgps_ai_message table is ready")
    yield


app = FastAPI(title="BioMedGPS AI API", version="0.1", lifespan=lifespan)

# Build LangGraph pipeline
graph = build_graph()


def check_session_uuid(session_uuid: str):
    if not re.fullmatch(UUID_PATTERN, session_uuid):
        raise HTTPException(status_code=400, detail=f"Invalid session uuid: {session_uuid}")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/v1/prompt-templates", response_model=List[PromptTemplate])
def get_prompt_templates():
    """List the prompt template categories and their template text."""
    return [
        PromptTemplate(category=category, template=template)
        for category, template in PROMPT_TEMPLATE.items()
    ]


@app.post("/api/v1/llm-messages", response_model=LlmMessage, status_code=201)
def post_llm_message(request: LlmMessageRequest, persist: bool = True):
    """Render the prompt for a context, ask the chat model and (optionally) store the answer."""
    if request.session_uuid is not None:
        check_session_uuid(request.session_uuid)

    initial_state = LlmMessageState(
        prompt_template_category=request.prompt_template_category,
        context=request.context,
        session_uuid=request.session_uuid,
        persist=persist,
    )

    try:
        result = graph.invoke(initial_state)
    except InvalidPromptTemplateCategory as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid context: {e.errors(include_url=False)}")
    except DuplicateSessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ChatBotError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.exception("Failed to answer LLM message")
        raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

    return LlmMessage.model_validate(result["llm_message"])


@app.get("/api/v1/llm-messages", response_model=LlmMessagePage)
def get_llm_messages(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
):
    if category is not None:
        try:
            category = to_category(category).value
        except InvalidPromptTemplateCategory as e:
            raise HTTPException(status_code=400, detail=str(e))

    records, total = list_llm_messages(category=category, page=page, page_size=page_size)
    return LlmMessagePage(total=total, page=page, page_size=page_size, records=records)


@app.get("/api/v1/llm-messages/{session_uuid}", response_model=LlmMessage)
def get_llm_message(session_uuid: str):
    check_session_uuid(session_uuid)

    msg = load_llm_message(session_uuid)
    if msg is None:
        raise HTTPException(status_code=404, detail=f"No message found for session {session_uuid}")
    return msg


@app.post("/api/v1/llm-messages/{session_uuid}/answer", response_model=LlmMessage)
def reanswer_llm_message(session_uuid: str):
    """Ask the chat model again with the stored prompt and replace the answer."""
    check_session_uuid(session_uuid)

    msg = load_llm_message(session_uuid)
    if msg is None:
        raise HTTPException(status_code=404, detail=f"No message found for session {session_uuid}")

    try:
        answered = answer_llm_message(msg, get_chatbot())
    except ChatBotError as e:
        raise HTTPException(status_code=502, detail=str(e))

    updated = update_llm_message_answer(session_uuid, answered.message)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"No message found for session {session_uuid}")
    return updated


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=Config.HOST, port=Config.PORT)
