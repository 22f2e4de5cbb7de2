# agents/services.py

import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from config import Config
from logger import setup_logger
from models.schema import LlmMessage
from .prompts import get_prompt_template, parse_context, render_prompt, to_category

logger = setup_logger("agents.services")

GPT4 = "gpt-4"
GPT3_5_TURBO = "gpt-3.5-turbo"


class ChatBotError(RuntimeError):
    pass


class ChatBot:
    """Single-turn chat client: one user prompt in, one answer out."""

    def __init__(self, model_name: str, openai_api_key: Optional[str] = None, client=None):
        self.model_name = GPT4 if model_name == "GPT4" else GPT3_5_TURBO
        self.role = "user"
        if client is None:
            try:
                client = OpenAI(api_key=openai_api_key)
            except OpenAIError as e:
                logger.error(f"Cannot create the OpenAI client: {e}")
                raise ChatBotError(f"Cannot create the OpenAI client: {e}") from e
        self.client = client

    def answer(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": self.role, "content": prompt}],
            )
        except OpenAIError as e:
            logger.error(f"Chat completion failed: {e}")
            raise ChatBotError(f"Chat completion failed: {e}") from e

        if not response.choices:
            raise ChatBotError("No message returned")

        message = response.choices[0].message.content
        if message is None:
            raise ChatBotError("No message returned")
        return message


@lru_cache(maxsize=1)
def get_chatbot() -> ChatBot:
    return ChatBot(Config.CHAT_MODEL, Config.OPENAI_API_KEY)


def new_llm_message(category: str, context: Dict[str, Any], session_uuid: Optional[str] = None) -> LlmMessage:
    """
    Build an unanswered message: resolve the template for the category,
    validate the context and render the prompt. A fresh UUID4 is used
    as the session id when none is given.
    """
    category = to_category(category)
    session_uuid = session_uuid or str(uuid.uuid4())

    prompt_template = get_prompt_template(category)
    context_obj = parse_context(category, context)
    prompt = render_prompt(context_obj, prompt_template)

    now = datetime.now(timezone.utc)
    return LlmMessage(
        session_uuid=session_uuid,
        prompt_template=prompt_template,
        prompt_template_category=category,
        context=context_obj.model_dump(),
        prompt=prompt,
        message="",
        created_at=now,
        updated_at=now,
    )


def answer_llm_message(msg: LlmMessage, chatbot: Optional[ChatBot] = None) -> LlmMessage:
    chatbot = chatbot or get_chatbot()
    answer = chatbot.answer(msg.prompt)
    return msg.model_copy(update={"message": answer, "updated_at": datetime.now(timezone.utc)})
