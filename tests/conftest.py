"""Shared pytest fixtures."""

import pytest
from fastapi.testclient import TestClient

from factshype.main import app
from factshype.models.lifecycle import ViewerRoles
from factshype.models.question import ChainConfig, OnChainAnswer, QuestionSnapshot, SlotData
from factshype.routers.chain import get_now
from factshype.services.chain import FactsReader, get_facts_reader

VIEWER = "0x" + "ab" * 20
COUNCIL = "0x" + "cd" * 20
OWNER = "0x" + "ef" * 20
HUNTER = "0x" + "12" * 20


def make_slot(**overrides) -> SlotData:
    fields = dict(start_hunt_at=500, end_hunt_at=1000)
    fields.update(overrides)
    return SlotData(**fields)


def raw_question(
    start=500, end=1000, answer_id=65535, overthrown=65535,
    challenged=False, challenge_succeeded=False, overridden=False, finalized=False,
):
    return (
        0,
        "0x" + "99" * 20,
        "Is the sky blue?",
        "0x" + "00" * 20,
        10**18,
        (start, end, answer_id, overthrown, challenged, challenge_succeeded, overridden, finalized),
    )


RAW_CONFIG = (
    (5000, 10**18, 10, 10**17, 500, 100, 50, 50),
    (7000, 2000),
    (5000, 5000, 1000, 500),
)


class FakeCall:
    def __init__(self, result):
        self.result = result

    async def call(self):
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeFunctions:
    """Stands in for ``contract.functions``; responses may be values, callables or exceptions."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __getattr__(self, name):
        def build(*args):
            self.calls.append((name, args))
            value = self.responses[name]
            if callable(value):
                value = value(*args)
            return FakeCall(value)
        return build


class FakeContract:
    def __init__(self, responses):
        self.functions = FakeFunctions(responses)


@pytest.fixture
def chain_responses() -> dict:
    return {
        "config": RAW_CONFIG,
        "getNumOfQuestions": 2,
        "questions": lambda qid: raw_question(),
        "getAnswers": lambda qid: [(HUNTER, b"\x01\x02", False, 5)],
        "getMostVouchedAnsId": lambda qid: 0,
        "isDAO": lambda address: False,
        "getUserEngagingQIds": lambda address: [1, 0, 1],
        "owner": OWNER,
        "COUNCIL": COUNCIL,
    }


@pytest.fixture
def fake_contract(chain_responses) -> FakeContract:
    return FakeContract(chain_responses)


@pytest.fixture
def reader(fake_contract) -> FactsReader:
    return FactsReader(fake_contract, snapshot_ttl=15, clock=lambda: 2000)


@pytest.fixture
def sample_config() -> ChainConfig:
    return ChainConfig(hunt_period=500, challenge_period=100, settle_period=50, review_period=50)


@pytest.fixture
def sample_slot() -> SlotData:
    return make_slot()


@pytest.fixture
def sample_snapshot(sample_slot) -> QuestionSnapshot:
    return QuestionSnapshot(
        question_id=0,
        question_type=0,
        seeker="0x" + "99" * 20,
        description="Is the sky blue?",
        bounty_token="0x" + "00" * 20,
        bounty_amount=10**18,
        slot=sample_slot,
        answers=[OnChainAnswer(answer_id=0, hunter=HUNTER, encoded_answer="0x0102", total_vouched=5)],
        most_vouched_answer_id=0,
        fetched_at=1000,
    )


@pytest.fixture
def anonymous() -> ViewerRoles:
    return ViewerRoles()


@pytest.fixture
def dao_member() -> ViewerRoles:
    return ViewerRoles(address=VIEWER, is_hunter_eligible=True, is_dao=True)


@pytest.fixture
def council_member() -> ViewerRoles:
    return ViewerRoles(address=COUNCIL, is_hunter_eligible=True, is_council=True)


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Minimal in-memory version of the Supabase query builder."""

    def __init__(self, store, table, fail_with=None):
        self.rows = store.setdefault(table, [])
        self.fail_with = fail_with
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_key = None
        self.order_desc = False
        self.limit_n = None
        self.on_conflict = None

    def select(self, *args, **kwargs):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, key, value):
        self.filters.append((key, value))
        return self

    def order(self, key, desc=False):
        self.order_key, self.order_desc = key, desc
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matches(self, row):
        return all(row.get(k) == v for k, v in self.filters)

    def execute(self):
        if self.fail_with is not None:
            raise self.fail_with

        if self.op == "insert":
            self.rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        if self.op == "update":
            changed = []
            for row in self.rows:
                if self._matches(row):
                    row.update(self.payload)
                    changed.append(dict(row))
            return FakeResponse(changed)

        if self.op == "upsert":
            key = self.on_conflict
            for row in self.rows:
                if row.get(key) == self.payload[key]:
                    row.update(self.payload)
                    return FakeResponse([dict(row)])
            self.rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        if self.op == "delete":
            removed = [dict(r) for r in self.rows if self._matches(r)]
            self.rows[:] = [r for r in self.rows if not self._matches(r)]
            return FakeResponse(removed)

        result = [dict(r) for r in self.rows if self._matches(r)]
        if self.order_key:
            result.sort(key=lambda r: r[self.order_key], reverse=self.order_desc)
        if self.limit_n is not None:
            result = result[: self.limit_n]
        return FakeResponse(result)


class FakeSupabase:
    def __init__(self, fail_with=None):
        self.store = {}
        self.fail_with = fail_with

    def table(self, name):
        return FakeQuery(self.store, name, self.fail_with)


def _install_supabase(monkeypatch, client):
    for module in ("factshype.services.sources", "factshype.services.rules"):
        monkeypatch.setattr(f"{module}.get_supabase", lambda: client)
        monkeypatch.setattr(f"{module}.get_supabase_admin", lambda: client)
    for module in ("factshype.routers.sources", "factshype.routers.questions", "factshype.main"):
        monkeypatch.setattr(f"{module}.check_database_connection", lambda: True)


@pytest.fixture
def fake_supabase(monkeypatch) -> FakeSupabase:
    client = FakeSupabase()
    _install_supabase(monkeypatch, client)
    return client


@pytest.fixture
def failing_supabase(monkeypatch) -> FakeSupabase:
    from postgrest.exceptions import APIError

    client = FakeSupabase(fail_with=APIError({"message": "connection reset", "code": "500"}))
    _install_supabase(monkeypatch, client)
    return client


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def chain_client(reader):
    """TestClient wired to the fake contract with the clock pinned at 1050."""
    app.dependency_overrides[get_facts_reader] = lambda: reader
    app.dependency_overrides[get_now] = lambda: 1050
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
