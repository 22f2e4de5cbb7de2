from langgraph.graph import StateGraph, END
from pipeline.schema import LlmMessageState
from agents.response_agent import render_llm_prompt, answer_prompt
from db.services import save_llm_message
from logger import setup_logger, log_llm_message
from datetime import datetime, timezone

logger = setup_logger("pipeline.graph")

def prompt_node(state: LlmMessageState) -> dict:
    msg = render_llm_prompt.invoke({
        "prompt_template_category": state.prompt_template_category,
        "context": state.context,
        "session_uuid": state.session_uuid,
    })
    logger.debug(f"Rendered {msg.prompt_template_category.value} prompt for session {msg.session_uuid}")

    return {
        **state.model_dump(),
        "session_uuid": msg.session_uuid,
        "llm_message": msg,
    }

def answer_node(state: LlmMessageState) -> dict:
    msg = state.llm_message
    answer = answer_prompt.invoke({"prompt": msg.prompt})
    answered = msg.model_copy(update={"message": answer, "updated_at": datetime.now(timezone.utc)})
    log_llm_message(logger, answered.session_uuid, answered.prompt_template_category.value, answered.prompt, answered.message)

    return {
        **state.model_dump(),
        "llm_message": answered,
    }

def save_node(state: LlmMessageState) -> dict:
    saved = save_llm_message(state.llm_message)
    return {
        **state.model_dump(),
        "llm_message": saved,
    }

def route_after_answer(state: LlmMessageState) -> str:
    """Persist only when asked to; a dry run ends right after the answer."""
    return "save" if state.persist else "end"

# Build LangGraph flow
def build_graph():
    builder = StateGraph(LlmMessageState)

    builder.add_node("prompt", prompt_node)
    builder.add_node("answer", answer_node)
    builder.add_node("save", save_node)

    builder.set_entry_point("prompt")

    builder.add_edge("prompt", "answer")
    builder.add_conditional_edges(
        "answer",
        route_after_answer,
        {
            "save": "save",
            "end": END
        }
    )
    builder.add_edge("save", END)

    return builder.compile()
