from pydantic import BaseModel, Field
from typing import Any, Optional


class ChatPayload(BaseModel):
    """Raw /chat body. Types are checked by the validator, not by pydantic."""
    message: Any = Field(None, description="The user message")
    model: Any = Field(None, description="Model key from the registry")


class ChatResponse(BaseModel):
    reply: str
    used: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
