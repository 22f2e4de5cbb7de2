# agents/prompts.py

from typing import Any, Dict

from models.schema import (
    CustomQuestion,
    Entity,
    ExpandedRelation,
    LlmContext,
    PromptTemplateCategory,
)


class InvalidPromptTemplateCategory(ValueError):
    pass


_INSTRUCTIONS = (
    "You need to execute the following instructions I send you: find the related information for the question, "
    "summarize the information you found and output a summary no more than 500 words, give me the sources of "
    "information. Notice: Please just return me the sentence 'I don't know what you say, it seems not to be a "
    "right question related with specific topic', if the question I send you is not related with medical concepts"
)

PROMPT_TEMPLATE = {
    PromptTemplateCategory.NODE_SUMMARY: (
        _INSTRUCTIONS + ", such as {{entity_type}}.\n\n"
        "What's the {{entity_name}} which id is {{entity_id}}?"
    ),
    PromptTemplateCategory.EDGE_SUMMARY: (
        _INSTRUCTIONS + ".\n\n"
        "What's the {{source_name}}[{{source_id}}, {{source_type}}] -> {{relation_type}} -> "
        "{{target_name}}[{{target_id}}, {{target_type}}?"
    ),
    PromptTemplateCategory.CUSTOM_QUESTION: (
        _INSTRUCTIONS + ".\n\n"
        "{{custom_question}}"
    ),
}

CONTEXT_TYPE = {
    PromptTemplateCategory.NODE_SUMMARY: Entity,
    PromptTemplateCategory.EDGE_SUMMARY: ExpandedRelation,
    PromptTemplateCategory.CUSTOM_QUESTION: CustomQuestion,
}


def to_category(category) -> PromptTemplateCategory:
    if isinstance(category, PromptTemplateCategory):
        return category
    try:
        return PromptTemplateCategory(category)
    except ValueError:
        raise InvalidPromptTemplateCategory(f"Invalid prompt template category: {category}")


def get_prompt_template(category) -> str:
    return PROMPT_TEMPLATE[to_category(category)]


def parse_context(category, data: Dict[str, Any]) -> LlmContext:
    """
    Validate a raw JSON context against the type the category expects.
    Raises pydantic.ValidationError when the context does not fit.
    """
    context_type = CONTEXT_TYPE[to_category(category)]
    if isinstance(data, context_type):
        return data
    return context_type.model_validate(data)


def _placeholders(context: LlmContext) -> Dict[str, str]:
    if isinstance(context, Entity):
        return {
            "entity_name": context.name,
            "entity_id": context.id,
            "entity_type": context.label,
        }
    if isinstance(context, ExpandedRelation):
        return {
            "source_name": context.source.name,
            "source_id": context.source.id,
            "source_type": context.source.label,
            "relation_type": context.relation.relation_type,
            "target_name": context.target.name,
            "target_id": context.target.id,
            "target_type": context.target.label,
        }
    if isinstance(context, CustomQuestion):
        return {"custom_question": context.custom_question}
    raise TypeError(f"Unsupported LLM context: {type(context).__name__}")


def render_prompt(context: LlmContext, prompt_template: str) -> str:
    """Replace every {{placeholder}} the context knows about; others are left as-is."""
    prompt = prompt_template
    for key, value in _placeholders(context).items():
        prompt = prompt.replace("{{" + key + "}}", value)
    return prompt
