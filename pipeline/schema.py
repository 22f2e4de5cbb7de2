# pipeline/schema.py

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from models.schema import LlmMessage

class LlmMessageState(BaseModel):
    prompt_template_category: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    session_uuid: Optional[str] = None
    persist: bool = True
    llm_message: Optional[LlmMessage] = None
