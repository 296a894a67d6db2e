"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation. Public chat models use the
camelCase field names of the widget protocol.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HistoryMessage(BaseModel):
    """One earlier message of the conversation, as replayed by the client."""
    role: str = Field(..., description="Either 'user' or 'assistant'.", examples=["user"])
    content: str = Field(..., description="Message text.")


class ChatRequest(BaseModel):
    """
    Turn request. ``message`` is optional at the schema level so that a missing
    message is reported by the pipeline as an input error.
    """
    message: Optional[str] = None
    """The customer's message."""
    sessionId: Optional[str] = None
    """Opaque client-chosen session id; defaults to 'anonymous'."""
    conversationHistory: List[HistoryMessage] = Field(default_factory=list)
    """Earlier messages of the conversation in order."""


class KnowledgeSource(BaseModel):
    """A knowledge entry cited by a reply."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    category: str
    question: str
    answer: str
    keywords: List[str]


class ChatResponse(BaseModel):
    response: str
    """Generated reply text."""
    sessionId: str
    """Session id the turn was stored under."""
    sources: List[KnowledgeSource]
    """At most two top-ranked knowledge entries."""


class FeedbackRequest(BaseModel):
    conversationId: int
    """Id of the stored turn."""
    feedback: str
    """Feedback label, e.g. 'helpful' or 'unhelpful'."""


class FeedbackResponse(BaseModel):
    success: bool


class FeedbackStat(BaseModel):
    feedback: str
    count: int


class TopQuestion(BaseModel):
    userMessage: str
    count: int


class AnalyticsResponse(BaseModel):
    totalConversations: int
    feedbackStats: List[FeedbackStat]
    topQuestions: List[TopQuestion]


class AdminCredentials(BaseModel):
    """
    Represents login credentials for an administrator.
    """
    username: str
    password: str


class KnowledgeEntryCreate(BaseModel):
    category: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    keywords: List[str] = Field(default_factory=list)


class KnowledgeEntryUpdate(BaseModel):
    """Content edit. Fields that are omitted or null are left unchanged."""
    category: Optional[str] = None
    question: Optional[str] = None
    answer: Optional[str] = None
    keywords: Optional[List[str]] = None
    is_active: Optional[bool] = None


class KnowledgeEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category: str
    question: str
    answer: str
    keywords: List[str]
    is_active: bool
    version: int
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KnowledgeEntryPage(BaseModel):
    data: List[KnowledgeEntryOut]
    total: int
    page: int
    limit: int


class CategoryCount(BaseModel):
    category: str
    count: int


class ProductCreate(BaseModel):
    product_name: str
    category: str
    subcategory: Optional[str] = None
    description: Optional[str] = None
    specifications: Optional[dict] = None
    price_range: Optional[str] = None
    features: Optional[List[str]] = None
    image_url: Optional[str] = None


class ProductOut(ProductCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
