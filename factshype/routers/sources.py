"""Sources router for the evidence hunters attach to their answers."""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional, List, Union

from factshype.database import check_database_connection
from factshype.errors import DatabaseError, SourceValidationError
from factshype.models.source import (
    Source, SourceCreate, SourceAnswerIdUpdate, SourceSaved
)
from factshype.services import sources as source_service

router = APIRouter(prefix="/sources", tags=["Sources"])


@router.post("", response_model=SourceSaved)
async def save_sources(data: SourceCreate):
    """Save sources for an answer, replacing any existing ones."""
    if not check_database_connection():
        raise HTTPException(status_code=503, detail="Database connection failed")

    try:
        source = await source_service.save_source(data)
    except SourceValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return SourceSaved(
        question_id=source.question_id,
        answer_id=source.answer_id,
        saved_at=source.created_at,
        updated_at=source.updated_at
    )


@router.patch("", response_model=Source)
async def update_answer_id(data: SourceAnswerIdUpdate):
    """Re-key sources to the answer id assigned on-chain."""
    try:
        source = await source_service.update_source_answer_id(
            data.question_id, data.old_answer_id, data.new_answer_id
        )
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if source is None:
        raise HTTPException(status_code=404, detail="Source not found")
    return source


@router.get("", response_model=Union[Source, List[Source]])
async def get_sources(
    question_id: int = Query(..., ge=0),
    answer_id: Optional[int] = Query(None, ge=0)
):
    """Get the sources of one answer, or of every answer to a question."""
    try:
        if answer_id is None:
            return await source_service.list_sources(question_id)
        source = await source_service.get_source(question_id, answer_id)
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if source is None:
        raise HTTPException(status_code=404, detail="Source not found")
    return source


@router.delete("")
async def delete_sources(
    question_id: int = Query(..., ge=0),
    answer_id: int = Query(..., ge=0)
):
    """Delete the sources of an answer."""
    try:
        await source_service.delete_source(question_id, answer_id)
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"message": "Source deleted successfully"}
