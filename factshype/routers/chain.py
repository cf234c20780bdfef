"""On-chain questions router: snapshots with derived status and actions."""

import asyncio
import logging
import time
from fastapi import APIRouter, HTTPException, Depends, Header, Query
from typing import Optional, List
from web3 import Web3

from factshype.errors import (
    ChainDataError, ChainUnavailableError, FactsError, QuestionNotFoundError
)
from factshype.models.lifecycle import (
    DerivedStatus, QuestionSummary, QuestionView, ViewerRoles
)
from factshype.models.question import ChainConfig
from factshype.services.chain import FactsReader, get_facts_reader
from factshype.services.lifecycle import derive_status, evaluate_question
from factshype.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chain", tags=["Chain"])


def get_now() -> int:
    """Single clock read per request, threaded into every derivation."""
    return int(time.time())


def _to_http(e: FactsError) -> HTTPException:
    if isinstance(e, QuestionNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ChainUnavailableError):
        return HTTPException(status_code=503, detail="Chain data unavailable, try again shortly")
    if isinstance(e, ChainDataError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


async def get_viewer(
    x_viewer_address: Optional[str] = Header(None),
    reader: FactsReader = Depends(get_facts_reader),
) -> Optional[ViewerRoles]:
    """Resolve the viewer's roles once per request, if an address was sent."""
    if not x_viewer_address:
        return None
    if not Web3.is_address(x_viewer_address):
        raise HTTPException(status_code=400, detail="Invalid viewer address")
    try:
        return await reader.get_viewer_roles(x_viewer_address)
    except FactsError as e:
        raise _to_http(e)


@router.get("/config", response_model=ChainConfig)
async def get_config(reader: FactsReader = Depends(get_facts_reader)):
    """Get the contract's period durations and thresholds."""
    try:
        return await reader.get_config()
    except FactsError as e:
        raise _to_http(e)


async def _summaries(
    reader: FactsReader,
    question_ids,
    config: ChainConfig,
    now: int,
    status: Optional[DerivedStatus],
) -> List[QuestionSummary]:
    """Read questions concurrently and project each one's status, skipping unreadable ones."""
    results = await asyncio.gather(
        *(reader.get_question(i) for i in question_ids), return_exceptions=True
    )

    summaries = []
    for question_id, result in zip(question_ids, results):
        if isinstance(result, FactsError):
            logger.warning("Skipping question %s: %s", question_id, result)
            continue
        if isinstance(result, BaseException):
            raise result

        question_status = derive_status(result.slot, config, now)
        if status and question_status != status:
            continue

        summaries.append(QuestionSummary(
            question_id=result.question_id,
            description=result.description,
            seeker=result.seeker,
            bounty_token=result.bounty_token,
            bounty_amount=result.bounty_amount,
            answer_count=len(result.answers),
            status=question_status,
            status_label=question_status.label,
            end_hunt_at=result.slot.end_hunt_at,
            stale=result.stale,
        ))

    return summaries


@router.get("/questions", response_model=List[QuestionSummary])
async def list_questions(
    status: Optional[DerivedStatus] = None,
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    reader: FactsReader = Depends(get_facts_reader),
    now: int = Depends(get_now),
):
    """List on-chain questions with their derived status."""
    limit = min(limit, get_settings().max_page_size)

    try:
        count, config = await asyncio.gather(
            reader.get_question_count(), reader.get_config()
        )
    except FactsError as e:
        raise _to_http(e)

    ids = range(offset, min(count, offset + limit))
    return await _summaries(reader, ids, config, now, status)


@router.get("/viewers/{address}/questions", response_model=List[QuestionSummary])
async def list_viewer_questions(
    address: str,
    status: Optional[DerivedStatus] = None,
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    reader: FactsReader = Depends(get_facts_reader),
    now: int = Depends(get_now),
):
    """List the questions an address has engaged with, with their derived status."""
    limit = min(limit, get_settings().max_page_size)
    if not Web3.is_address(address):
        raise HTTPException(status_code=400, detail="Invalid viewer address")

    try:
        ids, config = await asyncio.gather(
            reader.get_engaging_question_ids(address), reader.get_config()
        )
    except FactsError as e:
        raise _to_http(e)

    return await _summaries(reader, ids[offset:offset + limit], config, now, status)


@router.get("/questions/{question_id}", response_model=QuestionView)
async def get_question(
    question_id: int,
    reader: FactsReader = Depends(get_facts_reader),
    viewer: Optional[ViewerRoles] = Depends(get_viewer),
    now: int = Depends(get_now),
):
    """Get a question snapshot with its periods, status and viewer actions."""
    if question_id < 0:
        raise HTTPException(status_code=404, detail="Question not found")

    try:
        count = await reader.get_question_count()
        if question_id >= count:
            raise HTTPException(status_code=404, detail="Question not found")

        snapshot, config = await asyncio.gather(
            reader.get_question(question_id), reader.get_config()
        )
    except FactsError as e:
        raise _to_http(e)

    return QuestionView(
        question=snapshot,
        lifecycle=evaluate_question(snapshot, config, now, viewer),
    )
