"""
Read-only access to the Facts contract.

Fetches question, answer, config and viewer-role snapshots, validates them
at the boundary, and converts the contract's "no answer" sentinel into
``None`` so nothing downstream compares against a magic number.
"""

import asyncio
import logging
import time
from functools import lru_cache
from typing import Any, Awaitable, Callable, Hashable, Optional, Sequence

from pydantic import BaseModel, ValidationError
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError

from factshype.config import get_settings
from factshype.errors import ChainDataError, ChainUnavailableError, QuestionNotFoundError
from factshype.models.lifecycle import ViewerRoles
from factshype.models.question import ChainConfig, OnChainAnswer, QuestionSnapshot, SlotData
from factshype.services.abi import FACTS_ABI
from factshype.services.cache import SnapshotCache

logger = logging.getLogger(__name__)

# uint16 max, used by the contract for "no answer"
NO_ANSWER_ID = 65535


def answer_id_or_none(value: int) -> Optional[int]:
    value = int(value)
    return None if value == NO_ANSWER_ID else value


def parse_config(raw: Sequence[Any]) -> ChainConfig:
    """Build a ChainConfig from the ``config()`` return value."""
    system = raw[0]
    try:
        return ChainConfig(
            min_stake_of_native_bounty_to_hunt_bp=int(system[0]),
            min_stake_to_settle_as_dao=int(system[1]),
            min_vouched=int(system[2]),
            challenge_fee=int(system[3]),
            hunt_period=int(system[4]),
            challenge_period=int(system[5]),
            settle_period=int(system[6]),
            review_period=int(system[7]),
        )
    except ValidationError as e:
        raise ChainDataError(f"Invalid contract config: {e}") from e


def parse_slot_data(raw: Sequence[Any]) -> SlotData:
    """Build SlotData and refuse unset or inverted hunt timestamps."""
    try:
        slot = SlotData(
            start_hunt_at=int(raw[0]),
            end_hunt_at=int(raw[1]),
            answer_id=answer_id_or_none(raw[2]),
            overthrown_answer_id=answer_id_or_none(raw[3]),
            challenged=bool(raw[4]),
            challenge_succeeded=bool(raw[5]),
            overridden=bool(raw[6]),
            finalized=bool(raw[7]),
        )
    except ValidationError as e:
        raise ChainDataError(f"Invalid slot data: {e}") from e

    if slot.start_hunt_at == 0 or slot.end_hunt_at == 0:
        raise ChainDataError("Question hunt timestamps are unset")
    if slot.end_hunt_at < slot.start_hunt_at:
        raise ChainDataError("Question hunt ends before it starts")
    return slot


def parse_answers(raw: Sequence[Sequence[Any]]) -> list[OnChainAnswer]:
    return [
        OnChainAnswer(
            answer_id=index,
            hunter=str(item[0]),
            encoded_answer=Web3.to_hex(item[1]),
            by_challenger=bool(item[2]),
            total_vouched=int(item[3]),
        )
        for index, item in enumerate(raw)
    ]


def parse_question(
    question_id: int,
    raw_question: Sequence[Any],
    raw_answers: Sequence[Sequence[Any]],
    raw_most_vouched: int,
    fetched_at: int,
) -> QuestionSnapshot:
    """Assemble a validated snapshot from the three per-question reads."""
    return QuestionSnapshot(
        question_id=question_id,
        question_type=int(raw_question[0]),
        seeker=str(raw_question[1]),
        description=str(raw_question[2]),
        bounty_token=str(raw_question[3]),
        bounty_amount=int(raw_question[4]),
        slot=parse_slot_data(raw_question[5]),
        answers=parse_answers(raw_answers),
        most_vouched_answer_id=answer_id_or_none(raw_most_vouched),
        fetched_at=fetched_at,
    )


class FactsReader:
    """Cached, read-only view of the Facts contract."""

    def __init__(
        self,
        contract,
        snapshot_ttl: int = 15,
        snapshot_max_age: int = 600,
        snapshot_cache_size: int = 1024,
        clock: Callable[[], float] = time.time,
    ):
        self.contract = contract
        self.snapshots = SnapshotCache(
            ttl=snapshot_ttl, max_age=snapshot_max_age, max_entries=snapshot_cache_size
        )
        self.clock = clock

    async def _cached(self, key: Hashable, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Serve a fresh entry, else fetch; fall back to the last known value on RPC failure.

        Fallback models that carry a ``stale`` field are flagged. Plain values such
        as the question count or id lists are returned as they were last read.
        """
        cached = self.snapshots.get_fresh(key)
        if cached is not None:
            return cached

        try:
            value = await fetch()
        except (ChainDataError, QuestionNotFoundError):
            raise
        except Exception as e:
            last = self.snapshots.get_last_known(key)
            if last is None:
                logger.error("Chain read %s failed: %s", key, e)
                raise ChainUnavailableError(f"Chain data unavailable for {key}") from e
            logger.warning("Chain read %s failed, serving last known state: %s", key, e)
            if isinstance(last, BaseModel) and "stale" in type(last).model_fields:
                return last.model_copy(update={"stale": True})
            return last

        self.snapshots.set(key, value)
        return value

    async def get_config(self) -> ChainConfig:
        async def fetch():
            raw = await self.contract.functions.config().call()
            return parse_config(raw)

        return await self._cached("config", fetch)

    async def get_question_count(self) -> int:
        async def fetch():
            return int(await self.contract.functions.getNumOfQuestions().call())

        return await self._cached("question_count", fetch)

    async def get_question(self, question_id: int) -> QuestionSnapshot:
        """Fetch a question, its answers and its most-vouched answer concurrently."""
        functions = self.contract.functions

        async def fetch():
            try:
                raw_question, raw_answers, raw_most_vouched = await asyncio.gather(
                    functions.questions(question_id).call(),
                    functions.getAnswers(question_id).call(),
                    functions.getMostVouchedAnsId(question_id).call(),
                )
            except ContractLogicError as e:
                raise QuestionNotFoundError(f"Question {question_id} not found") from e

            return parse_question(
                question_id,
                raw_question,
                raw_answers,
                raw_most_vouched,
                fetched_at=int(self.clock()),
            )

        return await self._cached(("question", question_id), fetch)

    async def get_viewer_roles(self, address: str) -> ViewerRoles:
        """Resolve the viewer's on-chain roles in one batch of reads."""
        checksum = Web3.to_checksum_address(address)
        functions = self.contract.functions

        async def fetch():
            is_dao, owner, council = await asyncio.gather(
                functions.isDAO(checksum).call(),
                functions.owner().call(),
                functions.COUNCIL().call(),
            )
            return ViewerRoles(
                address=checksum,
                # anyone may hunt by staking with their answer
                is_hunter_eligible=True,
                is_dao=bool(is_dao),
                is_council=str(council).lower() == checksum.lower(),
                is_owner=str(owner).lower() == checksum.lower(),
            )

        return await self._cached(("roles", checksum), fetch)

    async def get_engaging_question_ids(self, address: str) -> list[int]:
        """Ids of the questions an address has asked, answered, vouched or challenged."""
        checksum = Web3.to_checksum_address(address)

        async def fetch():
            raw = await self.contract.functions.getUserEngagingQIds(checksum).call()
            # keep the first occurrence of repeated ids
            return list(dict.fromkeys(int(qid) for qid in raw))

        return await self._cached(("engaging", checksum), fetch)


@lru_cache
def get_facts_reader() -> FactsReader:
    """Get the process-wide contract reader."""
    settings = get_settings()
    w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.rpc_url))
    contract = w3.eth.contract(
        address=Web3.to_checksum_address(settings.facts_contract_address),
        abi=FACTS_ABI,
    )
    logger.info("Reading Facts contract %s via %s", settings.facts_contract_address, settings.rpc_url)
    return FactsReader(
        contract,
        snapshot_ttl=settings.snapshot_ttl_seconds,
        snapshot_max_age=settings.snapshot_max_age_seconds,
        snapshot_cache_size=settings.snapshot_cache_size,
    )
