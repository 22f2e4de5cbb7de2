# models/schema.py

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_serializer

UUID_PATTERN = r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
ENTITY_ID_PATTERN = r"^[A-Za-z0-9\-]+:[a-z0-9A-Z\.\-_]+$"
ENTITY_LABEL_PATTERN = r"^[A-Za-z]+$"


class PromptTemplateCategory(str, Enum):
    NODE_SUMMARY = "node_summary"
    EDGE_SUMMARY = "edge_summary"
    CUSTOM_QUESTION = "custom_question"


class Entity(BaseModel):
    """A knowledge-graph node, e.g. DrugBank:DB01050 (IBUPROFEN, Compound)."""
    id: str = Field(min_length=1, max_length=64, pattern=ENTITY_ID_PATTERN)
    name: str = Field(min_length=1, max_length=255)
    label: str = Field(min_length=1, max_length=64, pattern=ENTITY_LABEL_PATTERN)
    resource: str = Field(min_length=1, max_length=64)
    description: Optional[str] = None
    taxid: Optional[str] = None
    synonyms: Optional[str] = None
    pmids: Optional[str] = None
    xrefs: Optional[str] = None


class Relation(BaseModel):
    """A knowledge-graph edge between two entities."""
    id: int = Field(default=0, json_schema_extra={"readOnly": True})
    relation_type: str = Field(min_length=1, max_length=64)
    source_id: str = Field(min_length=1, max_length=64, pattern=ENTITY_ID_PATTERN)
    source_type: str = Field(min_length=1, max_length=64, pattern=ENTITY_LABEL_PATTERN)
    target_id: str = Field(min_length=1, max_length=64, pattern=ENTITY_ID_PATTERN)
    target_type: str = Field(min_length=1, max_length=64, pattern=ENTITY_LABEL_PATTERN)
    score: Optional[float] = None
    key_sentence: Optional[str] = None
    resource: str = Field(min_length=1, max_length=64)


class ExpandedRelation(BaseModel):
    relation: Relation
    source: Entity
    target: Entity


class CustomQuestion(BaseModel):
    custom_question: str = Field(min_length=1)


LlmContext = Union[Entity, ExpandedRelation, CustomQuestion]


class LlmMessage(BaseModel):
    """
    One question/answer exchange with the chat model, as stored in
    the biomedgps_ai_message table. Timestamps serialize as Unix seconds.
    """
    id: int = 0
    session_uuid: str = Field(pattern=UUID_PATTERN)
    prompt_template: str
    prompt_template_category: PromptTemplateCategory
    context: Dict[str, Any]
    prompt: str
    message: str = ""
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_ts(self, value: datetime) -> int:
        return int(value.timestamp())


class LlmMessageRequest(BaseModel):
    """Body of POST /api/v1/llm-messages. Read-only fields are not accepted."""
    prompt_template_category: str
    context: Dict[str, Any]
    session_uuid: Optional[str] = None


class LlmMessagePage(BaseModel):
    total: int
    page: int
    page_size: int
    records: List[LlmMessage]


class PromptTemplate(BaseModel):
    category: PromptTemplateCategory
    template: str
