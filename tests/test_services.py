import re

import pytest
from openai import OpenAIError

from agents.services import (
    GPT3_5_TURBO,
    GPT4,
    ChatBot,
    ChatBotError,
    answer_llm_message,
    new_llm_message,
)
from agents.prompts import InvalidPromptTemplateCategory
from models.schema import UUID_PATTERN, PromptTemplateCategory
from tests.fakes import FakeChatBot, fake_openai_client


@pytest.mark.parametrize("name, model", [
    ("GPT4", GPT4),
    ("GPT3", GPT3_5_TURBO),
    ("anything", GPT3_5_TURBO),
])
def test_chatbot_model_selection(name, model):
    assert ChatBot(name, client=fake_openai_client()).model_name == model


def test_chatbot_sends_a_single_user_message():
    client = fake_openai_client(content="An NSAID.")
    bot = ChatBot("GPT4", client=client)

    assert bot.answer("What is ibuprofen?") == "An NSAID."
    call = client.chat.completions.calls[0]
    assert call["model"] == GPT4
    assert call["messages"] == [{"role": "user", "content": "What is ibuprofen?"}]


def test_chatbot_without_content_fails():
    bot = ChatBot("GPT3", client=fake_openai_client(content=None))
    with pytest.raises(ChatBotError, match="No message returned"):
        bot.answer("What is ibuprofen?")


def test_chatbot_wraps_openai_errors():
    bot = ChatBot("GPT3", client=fake_openai_client(error=OpenAIError("quota exceeded")))
    with pytest.raises(ChatBotError, match="quota exceeded"):
        bot.answer("What is ibuprofen?")


def test_new_llm_message_generates_session(entity):
    msg = new_llm_message("node_summary", entity)

    assert re.match(UUID_PATTERN, msg.session_uuid)
    assert msg.prompt_template_category == PromptTemplateCategory.NODE_SUMMARY
    assert msg.message == ""
    assert msg.context["id"] == "DrugBank:DB01050"
    assert "IBUPROFEN" in msg.prompt
    assert msg.created_at == msg.updated_at


def test_new_llm_message_keeps_given_session(entity):
    session_uuid = "0b6f5f7e-2a57-4f7c-9d3e-2c1f0a9b8e71"
    assert new_llm_message("node_summary", entity, session_uuid).session_uuid == session_uuid


def test_new_llm_message_rejects_unknown_category(entity):
    with pytest.raises(InvalidPromptTemplateCategory):
        new_llm_message("summary", entity)


def test_answer_llm_message(entity):
    msg = new_llm_message("node_summary", entity)
    bot = FakeChatBot()

    answered = answer_llm_message(msg, bot)

    assert bot.prompts == [msg.prompt]
    assert answered.message == "Answer #1"
    assert answered.updated_at >= msg.updated_at
    assert msg.message == ""


def test_chatbot_without_choices_fails():
    bot = ChatBot("GPT3", client=fake_openai_client(choices=[]))
    with pytest.raises(ChatBotError, match="No message returned"):
        bot.answer("What is ibuprofen?")


def test_chatbot_client_creation_failure(monkeypatch):
    import agents.services

    def missing_key(api_key=None):
        raise OpenAIError("The api_key client option must be set")

    monkeypatch.setattr(agents.services, "OpenAI", missing_key)
    with pytest.raises(ChatBotError, match="api_key"):
        ChatBot("GPT3", openai_api_key=None)
