"""Tests for factshype/services/chain.py."""

import pytest
from web3.exceptions import ContractLogicError

from factshype.errors import ChainDataError, ChainUnavailableError, QuestionNotFoundError
from factshype.services.chain import (
    FactsReader,
    answer_id_or_none,
    parse_config,
    parse_question,
    parse_slot_data,
)
from tests.conftest import COUNCIL, OWNER, RAW_CONFIG, VIEWER, FakeContract, raw_question


def test_answer_id_sentinel_becomes_none():
    assert answer_id_or_none(65535) is None
    assert answer_id_or_none(0) == 0
    assert answer_id_or_none(3) == 3


def test_parse_config_reads_period_durations():
    config = parse_config(RAW_CONFIG)
    assert config.hunt_period == 500
    assert config.challenge_period == 100
    assert config.settle_period == 50
    assert config.review_period == 50
    assert config.min_stake_to_settle_as_dao == 10**18


def test_parse_config_rejects_negative_durations():
    raw = ((0, 0, 0, 0, 500, -1, 50, 50),) + RAW_CONFIG[1:]
    with pytest.raises(ChainDataError):
        parse_config(raw)


def test_parse_slot_data_maps_flags_and_sentinels():
    slot = parse_slot_data((500, 1000, 2, 65535, True, False, True, False))
    assert slot.start_hunt_at == 500
    assert slot.end_hunt_at == 1000
    assert slot.answer_id == 2
    assert slot.overthrown_answer_id is None
    assert slot.challenged
    assert slot.overridden
    assert not slot.finalized


@pytest.mark.parametrize("raw", [
    (0, 1000, 65535, 65535, False, False, False, False),
    (500, 0, 65535, 65535, False, False, False, False),
    (1000, 500, 65535, 65535, False, False, False, False),
])
def test_parse_slot_data_refuses_unset_or_inverted_timestamps(raw):
    with pytest.raises(ChainDataError):
        parse_slot_data(raw)


def test_parse_question_builds_snapshot():
    snapshot = parse_question(
        7,
        raw_question(),
        [("0x" + "12" * 20, b"\xde\xad", True, 42)],
        65535,
        fetched_at=1234,
    )
    assert snapshot.question_id == 7
    assert snapshot.description == "Is the sky blue?"
    assert snapshot.most_vouched_answer_id is None
    assert snapshot.answers[0].answer_id == 0
    assert snapshot.answers[0].encoded_answer == "0xdead"
    assert snapshot.answers[0].by_challenger
    assert snapshot.answers[0].total_vouched == 42
    assert snapshot.fetched_at == 1234
    assert not snapshot.stale


async def test_get_question_reads_all_parts(reader, fake_contract):
    snapshot = await reader.get_question(1)
    assert snapshot.question_id == 1
    assert snapshot.most_vouched_answer_id == 0
    assert len(snapshot.answers) == 1
    assert snapshot.fetched_at == 2000
    called = {name for name, _ in fake_contract.functions.calls}
    assert {"questions", "getAnswers", "getMostVouchedAnsId"} <= called


async def test_get_question_is_cached_within_freshness_window(reader, fake_contract):
    await reader.get_question(1)
    await reader.get_question(1)
    question_reads = [c for c in fake_contract.functions.calls if c[0] == "questions"]
    assert len(question_reads) == 1


async def test_get_question_missing_raises_not_found(chain_responses):
    chain_responses["questions"] = ContractLogicError("execution reverted")
    reader = FactsReader(FakeContract(chain_responses))
    with pytest.raises(QuestionNotFoundError):
        await reader.get_question(99)


async def test_rpc_failure_without_history_is_unavailable(chain_responses):
    chain_responses["getAnswers"] = ConnectionError("rpc down")
    reader = FactsReader(FakeContract(chain_responses))
    with pytest.raises(ChainUnavailableError):
        await reader.get_question(1)


async def test_rpc_failure_serves_last_known_snapshot_as_stale(chain_responses):
    elapsed = [0]
    reader = FactsReader(FakeContract(chain_responses), snapshot_ttl=15, clock=lambda: 0)
    reader.snapshots.clock = lambda: elapsed[0]

    first = await reader.get_question(1)
    assert not first.stale

    elapsed[0] = 100
    chain_responses["getAnswers"] = ConnectionError("rpc down")
    second = await reader.get_question(1)
    assert second.stale
    assert second.slot == first.slot


async def test_invalid_chain_data_is_not_masked_by_cache(chain_responses):
    chain_responses["questions"] = lambda qid: raw_question(start=0, end=0)
    reader = FactsReader(FakeContract(chain_responses))
    with pytest.raises(ChainDataError):
        await reader.get_question(5)


async def test_get_config_and_count(reader):
    config = await reader.get_config()
    assert config.challenge_period == 100
    assert await reader.get_question_count() == 2


async def test_viewer_roles_for_plain_address(reader):
    roles = await reader.get_viewer_roles(VIEWER)
    assert roles.address.lower() == VIEWER
    assert roles.is_hunter_eligible
    assert not roles.is_dao
    assert not roles.is_council
    assert not roles.is_owner


async def test_viewer_roles_for_dao_council_and_owner(chain_responses):
    chain_responses["isDAO"] = lambda address: True
    reader = FactsReader(FakeContract(chain_responses))

    council = await reader.get_viewer_roles(COUNCIL)
    assert council.is_council
    assert council.is_dao
    assert not council.is_owner

    owner = await reader.get_viewer_roles(OWNER)
    assert owner.is_owner
    assert not owner.is_council


async def test_snapshot_cache_does_not_grow_with_distinct_viewers(chain_responses):
    elapsed = [0]
    reader = FactsReader(
        FakeContract(chain_responses), snapshot_ttl=15, snapshot_max_age=60, snapshot_cache_size=100
    )
    reader.snapshots.clock = lambda: elapsed[0]

    for i in range(2000):
        await reader.get_viewer_roles("0x" + f"{i:040x}")
    assert len(reader.snapshots.entries) <= 100

    elapsed[0] = 10_000
    await reader.get_config()
    assert list(reader.snapshots.entries) == ["config"]


async def test_rpc_failure_serves_last_known_config_and_roles_as_stale(chain_responses):
    elapsed = [0]
    reader = FactsReader(FakeContract(chain_responses), snapshot_ttl=15)
    reader.snapshots.clock = lambda: elapsed[0]

    assert not (await reader.get_config()).stale
    assert not (await reader.get_viewer_roles(VIEWER)).stale

    elapsed[0] = 100
    chain_responses["config"] = ConnectionError("rpc down")
    chain_responses["owner"] = ConnectionError("rpc down")
    config = await reader.get_config()
    roles = await reader.get_viewer_roles(VIEWER)
    assert config.stale
    assert config.challenge_period == 100
    assert roles.stale


async def test_rpc_failure_after_max_age_is_unavailable(chain_responses):
    elapsed = [0]
    reader = FactsReader(FakeContract(chain_responses), snapshot_ttl=15, snapshot_max_age=60)
    reader.snapshots.clock = lambda: elapsed[0]
    await reader.get_config()

    elapsed[0] = 61
    chain_responses["config"] = ConnectionError("rpc down")
    with pytest.raises(ChainUnavailableError):
        await reader.get_config()


async def test_engaging_question_ids_are_deduplicated(reader, fake_contract):
    assert await reader.get_engaging_question_ids(VIEWER) == [1, 0]
    name, args = [c for c in fake_contract.functions.calls if c[0] == "getUserEngagingQIds"][0]
    assert args[0].lower() == VIEWER
