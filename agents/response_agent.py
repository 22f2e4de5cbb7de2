# agents/response_agent.py

from langchain_core.tools import tool
from typing import Dict, Optional
from models.schema import LlmMessage
from . import services


@tool
def render_llm_prompt(prompt_template_category: str, context: Dict, session_uuid: Optional[str] = None) -> LlmMessage:
    """
    Build an unanswered LLM message for a knowledge-graph context.
    The category picks the prompt template (node_summary, edge_summary or custom_question).
    """
    msg = services.new_llm_message(prompt_template_category, context, session_uuid)
    return msg


@tool
def answer_prompt(prompt: str) -> str:
    """Ask the configured chat model a single question and return its answer."""
    return services.get_chatbot().answer(prompt)
