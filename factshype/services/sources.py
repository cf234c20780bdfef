"""Sources service: persistence of the free-text sources behind each answer."""

import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from postgrest.exceptions import APIError

from factshype.database import get_supabase, get_supabase_admin
from factshype.errors import DatabaseError, SourceValidationError
from factshype.models.source import Source, SourceCreate

logger = logging.getLogger(__name__)

TABLE = "sources"


def validate_source_data(data: SourceCreate) -> None:
    """Reject blank text fields and non-EVM hunter addresses."""
    if not data.answer.strip():
        raise SourceValidationError("Answer cannot be empty")
    if not data.sources.strip():
        raise SourceValidationError("Sources cannot be empty")
    if not data.hunter_address.startswith("0x"):
        raise SourceValidationError("Invalid hunter address")


def _find(question_id: int, answer_id: int) -> Optional[dict]:
    result = get_supabase().table(TABLE).select("*").eq(
        "question_id", question_id
    ).eq("answer_id", answer_id).limit(1).execute()
    return result.data[0] if result.data else None


async def source_exists(question_id: int, answer_id: int) -> bool:
    try:
        return _find(question_id, answer_id) is not None
    except APIError as e:
        logger.error("Error checking source existence: %s", e)
        raise DatabaseError("Failed to check source existence") from e


async def save_source(data: SourceCreate) -> Source:
    """
    Create or update the sources for ``(question_id, answer_id)``.

    Raises SourceValidationError for invalid payloads and DatabaseError
    when the store fails.
    """
    validate_source_data(data)

    now = datetime.now(timezone.utc).isoformat()
    timestamp = data.timestamp if data.timestamp is not None else int(time.time() * 1000)
    fields = {
        "answer": data.answer,
        "sources": data.sources,
        "hunter_address": data.hunter_address,
        "timestamp": timestamp,
        "updated_at": now,
    }

    admin = get_supabase_admin()
    try:
        if _find(data.question_id, data.answer_id) is not None:
            admin.table(TABLE).update(fields).eq(
                "question_id", data.question_id
            ).eq("answer_id", data.answer_id).execute()
        else:
            admin.table(TABLE).insert({
                "question_id": data.question_id,
                "answer_id": data.answer_id,
                "created_at": now,
                **fields,
            }).execute()

        saved = _find(data.question_id, data.answer_id)
    except APIError as e:
        logger.error("Error saving sources for question %s answer %s: %s",
                     data.question_id, data.answer_id, e)
        raise DatabaseError("Failed to save source to database") from e

    if saved is None:
        raise DatabaseError("Source not found after save")

    logger.info("Saved sources for question %s answer %s", data.question_id, data.answer_id)
    return Source(**saved)


async def get_source(question_id: int, answer_id: int) -> Optional[Source]:
    try:
        row = _find(question_id, answer_id)
    except APIError as e:
        logger.error("Error fetching source: %s", e)
        raise DatabaseError("Failed to fetch source from database") from e
    return Source(**row) if row else None


async def list_sources(question_id: int) -> List[Source]:
    """All sources for a question, newest first."""
    try:
        result = get_supabase().table(TABLE).select("*").eq(
            "question_id", question_id
        ).order("created_at", desc=True).execute()
    except APIError as e:
        logger.error("Error fetching sources for question %s: %s", question_id, e)
        raise DatabaseError("Failed to fetch sources from database") from e
    return [Source(**row) for row in result.data]


async def update_source_answer_id(
    question_id: int, old_answer_id: int, new_answer_id: int
) -> Optional[Source]:
    """Move a source to the answer id assigned on-chain.

    Returns None when no source exists under the new id afterwards.
    """
    try:
        get_supabase_admin().table(TABLE).update({
            "answer_id": new_answer_id,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("question_id", question_id).eq("answer_id", old_answer_id).execute()
        row = _find(question_id, new_answer_id)
    except APIError as e:
        logger.error("Error updating source answer id: %s", e)
        raise DatabaseError("Failed to update source answer ID in database") from e
    return Source(**row) if row else None


async def delete_source(question_id: int, answer_id: int) -> None:
    try:
        get_supabase_admin().table(TABLE).delete().eq(
            "question_id", question_id
        ).eq("answer_id", answer_id).execute()
    except APIError as e:
        logger.error("Error deleting source: %s", e)
        raise DatabaseError("Failed to delete source from database") from e
