"""Chat, LLM output and request body schemas."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl

from src.services.competitions.schemas.notebook import DeconstructedNotebook


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


# ==================== LLM outputs ====================

class SummaryOutput(BaseModel):
    summary: str


class AnswerOutput(BaseModel):
    answer: str


# ==================== Request bodies ====================

class MentorChatRequest(BaseModel):
    question: str = Field(..., min_length=1)
    competition_context: str = Field(..., description="Context file text or analysis summary")
    history: List[ChatMessage] = Field(default_factory=list)


class TutorChatRequest(BaseModel):
    question: str = Field(..., min_length=1)
    interests: List[str] = Field(default_factory=list)
    history: List[ChatMessage] = Field(default_factory=list)


class ChatAnswer(BaseModel):
    answer: str


class CustomCompetitionRequest(BaseModel):
    url: HttpUrl


class CredentialsRequest(BaseModel):
    username: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)


class ProgressRequest(BaseModel):
    xp: int = Field(..., ge=0)
    level: int = Field(..., ge=1)
    competitions_analysed: int = Field(..., ge=0)


class ResetStuckRequest(BaseModel):
    threshold_seconds: Optional[float] = Field(default=None, gt=0)


class DemoAnalysisRequest(BaseModel):
    summary: str = Field(..., min_length=1)
    deconstructed_notebooks: List[DeconstructedNotebook] = Field(default_factory=list)


__all__ = [
    "ChatRole",
    "ChatMessage",
    "SummaryOutput",
    "AnswerOutput",
    "MentorChatRequest",
    "TutorChatRequest",
    "ChatAnswer",
    "CustomCompetitionRequest",
    "CredentialsRequest",
    "ProgressRequest",
    "ResetStuckRequest",
    "DemoAnalysisRequest",
]
