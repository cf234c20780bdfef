"""Question rules router."""

from fastapi import APIRouter, HTTPException

from factshype.database import check_database_connection
from factshype.errors import DatabaseError
from factshype.models.question import (
    QuestionRules, QuestionRulesCreate, QuestionRulesUpdate
)
from factshype.services import rules as rules_service

router = APIRouter(prefix="/questions", tags=["Questions"])


@router.post("", response_model=QuestionRules)
async def save_question_rules(data: QuestionRulesCreate):
    """Create or replace the rules attached to an on-chain question."""
    if not check_database_connection():
        raise HTTPException(status_code=503, detail="Database connection failed")

    try:
        return await rules_service.upsert_rules(data.question_id, data.rules)
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{question_id}", response_model=QuestionRules)
async def get_question_rules(question_id: int):
    """Get the rules of a question."""
    try:
        question = await rules_service.get_rules(question_id)
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


@router.put("/{question_id}", response_model=QuestionRules)
async def update_question_rules(question_id: int, data: QuestionRulesUpdate):
    """Update the rules of an existing question."""
    try:
        question = await rules_service.update_rules(question_id, data.rules)
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


@router.delete("/{question_id}")
async def delete_question_rules(question_id: int):
    """Delete the rules of a question."""
    try:
        deleted = await rules_service.delete_rules(question_id)
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Question not found")
    return {"message": "Question deleted successfully"}
