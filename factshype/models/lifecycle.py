"""Question lifecycle models: periods, derived status, viewer roles and actions."""

from enum import Enum
from pydantic import BaseModel
from typing import Optional, List, Tuple

from factshype.models.question import QuestionSnapshot


class DerivedStatus(str, Enum):
    """Question status as projected from chain state and the current time."""
    ACTIVE = "active"
    CHALLENGE_PERIOD = "challenge_period"
    SETTLING = "settling"
    CHALLENGED = "challenged"
    REVIEWED = "reviewed"
    FINALIZED = "finalized"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    DerivedStatus.ACTIVE: "Active",
    DerivedStatus.CHALLENGE_PERIOD: "Challenge Period",
    DerivedStatus.SETTLING: "Settling",
    DerivedStatus.CHALLENGED: "Challenged",
    DerivedStatus.REVIEWED: "Reviewed",
    DerivedStatus.FINALIZED: "Finalized",
}


class WindowPhase(str, Enum):
    """Position of a period window relative to now."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"


class PeriodWindow(BaseModel):
    """Half-open window ``[start, end)`` in Unix seconds."""
    start: int
    end: int

    class Config:
        frozen = True

    @property
    def duration(self) -> int:
        return self.end - self.start

    def contains(self, now: int) -> bool:
        return self.start <= now < self.end

    def phase(self, now: int) -> WindowPhase:
        if now < self.start:
            return WindowPhase.UPCOMING
        if now < self.end:
            return WindowPhase.ACTIVE
        return WindowPhase.ENDED


class QuestionPeriods(BaseModel):
    """The four contiguous lifecycle windows of a question."""
    hunt: PeriodWindow
    challenge: PeriodWindow
    settle: PeriodWindow
    review: PeriodWindow

    class Config:
        frozen = True

    def windows(self) -> List[Tuple[str, PeriodWindow]]:
        """Windows in chronological order."""
        return [
            ("hunt", self.hunt),
            ("challenge", self.challenge),
            ("settle", self.settle),
            ("review", self.review),
        ]

    def current(self, now: int) -> Optional[str]:
        """Name of the window containing ``now``, if any."""
        for name, window in self.windows():
            if window.contains(now):
                return name
        return None

    def visible_windows(
        self, now: int, most_vouched_answer_id: Optional[int]
    ) -> List[str]:
        """Windows worth showing to a viewer.

        Once the hunt is over without a leading answer there is nothing to
        challenge or review, so only the hunt window is shown.
        """
        if now < self.hunt.end or most_vouched_answer_id is not None:
            return [name for name, _ in self.windows()]
        return ["hunt"]


class ViewerRoles(BaseModel):
    """On-chain role memberships of the viewing address."""
    address: Optional[str] = None
    is_hunter_eligible: bool = False
    is_dao: bool = False
    is_council: bool = False
    is_owner: bool = False
    stale: bool = False

    class Config:
        frozen = True


class ActionFlags(BaseModel):
    """Which lifecycle actions the UI should enable."""
    can_submit_answer: bool = False
    can_vouch: bool = False
    can_challenge: bool = False
    can_settle: bool = False
    can_override: bool = False
    can_finalize: bool = False
    # DAO settlement of a challenged question goes through dispute review
    settle_requires_review: bool = False

    class Config:
        frozen = True


class WindowView(BaseModel):
    """A period window with its phase at request time."""
    name: str
    start: int
    end: int
    phase: WindowPhase


class QuestionLifecycle(BaseModel):
    """Everything the presentation layer needs for one question."""
    question_id: int
    status: DerivedStatus
    status_label: str
    now: int
    current_window: Optional[str] = None
    windows: List[WindowView]
    visible_windows: List[str]
    viewer: Optional[ViewerRoles] = None
    actions: Optional[ActionFlags] = None


class QuestionSummary(BaseModel):
    """List entry for an on-chain question."""
    question_id: int
    description: str
    seeker: str
    bounty_token: str
    bounty_amount: int
    answer_count: int
    status: DerivedStatus
    status_label: str
    end_hunt_at: int
    stale: bool = False


class QuestionView(BaseModel):
    """An on-chain question together with its derived lifecycle."""
    question: QuestionSnapshot
    lifecycle: QuestionLifecycle
