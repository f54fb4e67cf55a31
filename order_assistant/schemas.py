# order_assistant/schemas.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class ProcessOrderIn(BaseModel):
    """Inbound body of the order assistant.

    ``message`` and ``customerId`` are optional here so a missing field is
    reported as ``{"error": ...}`` with a 400 instead of a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    chat_history: List[ChatMessage] = Field(default_factory=list, alias="chatHistory")


class SuggestedProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    item_number: str = ""
    description: str = ""
    quantity: int = Field(default=1, ge=1)
    category: Optional[str] = None
    customer_note: Optional[str] = Field(default=None, alias="customerNote")
    confidence: Confidence = Confidence.MEDIUM


class ResolutionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ai_response: str = Field(alias="aiResponse", min_length=1)
    suggested_products: List[SuggestedProduct] = Field(
        default_factory=list, alias="suggestedProducts", max_length=8
    )
