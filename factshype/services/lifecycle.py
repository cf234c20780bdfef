"""
Question lifecycle derivation.

Pure functions projecting a chain snapshot plus the current instant onto
period windows, a single status label, and the set of actions a viewer may
take. Nothing here does I/O or reads the clock; ``now`` is always passed in
as integer Unix seconds.

The contract is the enforcement point. These results are UI hints, so an
unmet precondition yields a disabled action rather than an error.
"""

from typing import Optional

from factshype.models.question import SlotData, ChainConfig, QuestionSnapshot
from factshype.models.lifecycle import (
    ActionFlags,
    DerivedStatus,
    PeriodWindow,
    QuestionLifecycle,
    QuestionPeriods,
    ViewerRoles,
    WindowView,
)


def compute_periods(slot: SlotData, config: ChainConfig) -> QuestionPeriods:
    """
    Build the hunt, challenge, settle and review windows of a question.

    The hunt window ends at the stored ``end_hunt_at`` (which already
    includes any extra hunt time); later windows are chained off it.
    """
    hunt = PeriodWindow(start=slot.start_hunt_at, end=slot.end_hunt_at)
    challenge = PeriodWindow(start=hunt.end, end=hunt.end + config.challenge_period)
    settle = PeriodWindow(start=challenge.end, end=challenge.end + config.settle_period)
    review = PeriodWindow(start=settle.end, end=settle.end + config.review_period)

    return QuestionPeriods(hunt=hunt, challenge=challenge, settle=settle, review=review)


def derive_status(slot: SlotData, config: ChainConfig, now: int) -> DerivedStatus:
    """
    Project a question onto exactly one status.

    On-chain flags take precedence over time: a question past its challenge
    window that has been challenged is Challenged, not Settling.
    """
    if slot.finalized:
        return DerivedStatus.FINALIZED
    if slot.overridden:
        return DerivedStatus.REVIEWED
    if slot.challenged:
        return DerivedStatus.CHALLENGED

    if now >= slot.end_hunt_at + config.challenge_period:
        return DerivedStatus.SETTLING
    if now >= slot.end_hunt_at:
        return DerivedStatus.CHALLENGE_PERIOD
    return DerivedStatus.ACTIVE


def derive_actions(
    status: DerivedStatus,
    slot: SlotData,
    viewer: ViewerRoles,
    most_vouched_answer_id: Optional[int],
    *,
    periods: QuestionPeriods,
    now: int,
    answer_count: int,
) -> ActionFlags:
    """Decide which lifecycle actions are enabled for ``viewer``."""
    hunt_over = now >= periods.hunt.end
    challenge_over = now >= periods.challenge.end

    if most_vouched_answer_id is None:
        settle_window_open = hunt_over
    else:
        settle_window_open = challenge_over

    can_settle = (
        status == DerivedStatus.SETTLING
        and settle_window_open
        and (viewer.is_dao or not slot.challenged)
        and not slot.finalized
    )

    can_override = (
        slot.challenged
        and periods.review.contains(now)
        and not slot.finalized
        and not slot.overridden
        and viewer.is_council
    )

    return ActionFlags(
        can_submit_answer=status == DerivedStatus.ACTIVE,
        can_vouch=status == DerivedStatus.ACTIVE and answer_count > 0,
        can_challenge=status == DerivedStatus.CHALLENGE_PERIOD,
        can_settle=can_settle,
        can_override=can_override,
        can_finalize=now >= periods.review.end and not slot.finalized,
        settle_requires_review=(
            viewer.is_dao
            and status == DerivedStatus.CHALLENGED
            and challenge_over
            and not slot.finalized
        ),
    )


def evaluate_question(
    snapshot: QuestionSnapshot,
    config: ChainConfig,
    now: int,
    viewer: Optional[ViewerRoles] = None,
) -> QuestionLifecycle:
    """Run the full derivation for one question snapshot.

    Actions are only computed when a viewer is given.
    """
    slot = snapshot.slot
    periods = compute_periods(slot, config)
    status = derive_status(slot, config, now)

    actions = None
    if viewer is not None:
        actions = derive_actions(
            status,
            slot,
            viewer,
            snapshot.most_vouched_answer_id,
            periods=periods,
            now=now,
            answer_count=len(snapshot.answers),
        )

    return QuestionLifecycle(
        question_id=snapshot.question_id,
        status=status,
        status_label=status.label,
        now=now,
        current_window=periods.current(now),
        windows=[
            WindowView(name=name, start=w.start, end=w.end, phase=w.phase(now))
            for name, w in periods.windows()
        ],
        visible_windows=periods.visible_windows(now, snapshot.most_vouched_answer_id),
        viewer=viewer,
        actions=actions,
    )
