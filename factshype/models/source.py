"""Answer sources models."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class SourceCreate(BaseModel):
    """Payload to save the sources backing an answer."""
    question_id: int = Field(ge=0)
    answer_id: int = Field(ge=0)
    answer: str
    sources: str
    hunter_address: str
    timestamp: Optional[int] = None  # ms since epoch, set by the client


class SourceAnswerIdUpdate(BaseModel):
    """Payload to re-key a source once the on-chain answer id is known."""
    question_id: int = Field(ge=0)
    old_answer_id: int = Field(ge=0)
    new_answer_id: int = Field(ge=0)


class Source(BaseModel):
    """Stored sources record."""
    question_id: int
    answer_id: int
    answer: str
    sources: str
    hunter_address: str
    timestamp: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SourceSaved(BaseModel):
    """Result of a save."""
    question_id: int
    answer_id: int
    saved_at: datetime
    updated_at: datetime
