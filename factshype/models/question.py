"""On-chain question models and off-chain question rules."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class SlotData(BaseModel):
    """Mutable lifecycle slot of an on-chain question.

    Answer ids are ``None`` when the contract reports no answer.
    """
    start_hunt_at: int = Field(ge=0)
    end_hunt_at: int = Field(ge=0)
    answer_id: Optional[int] = None
    overthrown_answer_id: Optional[int] = None
    challenged: bool = False
    challenge_succeeded: bool = False
    overridden: bool = False
    finalized: bool = False

    class Config:
        frozen = True


class ChainConfig(BaseModel):
    """Contract system config. Durations are in seconds."""
    hunt_period: int = Field(ge=0)
    challenge_period: int = Field(ge=0)
    settle_period: int = Field(ge=0)
    review_period: int = Field(ge=0)
    min_stake_of_native_bounty_to_hunt_bp: int = 0
    min_stake_to_settle_as_dao: int = 0
    min_vouched: int = 0
    challenge_fee: int = 0
    stale: bool = False

    class Config:
        frozen = True


class OnChainAnswer(BaseModel):
    """Answer record as stored by the contract."""
    answer_id: int
    hunter: str
    encoded_answer: str  # hex
    by_challenger: bool = False
    total_vouched: int = Field(ge=0)


class QuestionSnapshot(BaseModel):
    """Read-only snapshot of one question, its answers and leading answer."""
    question_id: int = Field(ge=0)
    question_type: int
    seeker: str
    description: str
    bounty_token: str
    bounty_amount: int
    slot: SlotData
    answers: List[OnChainAnswer] = []
    most_vouched_answer_id: Optional[int] = None
    fetched_at: int
    stale: bool = False


class QuestionRulesCreate(BaseModel):
    """Payload to save rules for a question."""
    question_id: int = Field(ge=0)
    rules: Optional[str] = None


class QuestionRulesUpdate(BaseModel):
    """Payload to update rules of an existing question."""
    rules: Optional[str] = None


class QuestionRules(BaseModel):
    """Stored question rules record."""
    question_id: int
    rules: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
