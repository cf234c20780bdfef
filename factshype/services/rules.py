"""Question rules service."""

import logging
from datetime import datetime, timezone
from typing import Optional

from postgrest.exceptions import APIError

from factshype.database import get_supabase, get_supabase_admin
from factshype.errors import DatabaseError
from factshype.models.question import QuestionRules

logger = logging.getLogger(__name__)

TABLE = "questions"


def _find(question_id: int) -> Optional[dict]:
    result = get_supabase().table(TABLE).select("*").eq(
        "question_id", question_id
    ).limit(1).execute()
    return result.data[0] if result.data else None


async def upsert_rules(question_id: int, rules: Optional[str]) -> QuestionRules:
    """Create or replace the rules of a question. Blank rules are stored as null."""
    now = datetime.now(timezone.utc).isoformat()
    existing = None
    try:
        existing = _find(question_id)
        record = {
            "question_id": question_id,
            "rules": rules or None,
            "updated_at": now,
        }
        if existing is None:
            record["created_at"] = now
        get_supabase_admin().table(TABLE).upsert(
            record, on_conflict="question_id"
        ).execute()
        saved = _find(question_id)
    except APIError as e:
        logger.error("Error upserting question %s: %s", question_id, e)
        raise DatabaseError("Failed to save question to database") from e

    if saved is None:
        raise DatabaseError("Question not found after save")
    logger.info("%s rules for question %s", "Updated" if existing else "Created", question_id)
    return QuestionRules(**saved)


async def get_rules(question_id: int) -> Optional[QuestionRules]:
    try:
        row = _find(question_id)
    except APIError as e:
        logger.error("Error fetching question %s: %s", question_id, e)
        raise DatabaseError("Failed to fetch question from database") from e
    return QuestionRules(**row) if row else None


async def update_rules(question_id: int, rules: Optional[str]) -> Optional[QuestionRules]:
    """Update rules of an existing question. Returns None if it does not exist.

    Blank rules are stored as null, as in ``upsert_rules``.
    """
    try:
        if _find(question_id) is None:
            return None
        get_supabase_admin().table(TABLE).update({
            "rules": rules or None,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("question_id", question_id).execute()
        row = _find(question_id)
    except APIError as e:
        logger.error("Error updating question %s: %s", question_id, e)
        raise DatabaseError("Failed to update question in database") from e
    return QuestionRules(**row) if row else None


async def delete_rules(question_id: int) -> bool:
    """Delete a question's rules. Returns False if there was nothing to delete."""
    try:
        if _find(question_id) is None:
            return False
        get_supabase_admin().table(TABLE).delete().eq(
            "question_id", question_id
        ).execute()
    except APIError as e:
        logger.error("Error deleting question %s: %s", question_id, e)
        raise DatabaseError("Failed to delete question from database") from e
    return True
