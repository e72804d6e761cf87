import asyncio
from collections.abc import Callable
from datetime import timedelta

from conftest import ALICE, CAROL
from landvote.clock import FixedClock
from landvote.domain.proposal import Proposal
from landvote.domain.status import ProposalStatus
from landvote.domain.vote import VoteChoice
from landvote.orchestration.lifecycle import LifecycleController
from landvote.runtime.sweeper import DeadlineSweeper


def test_run_once_closes_due_proposals_and_notifies(
    controller: LifecycleController,
    clock: FixedClock,
    active_proposal: Callable[..., Proposal],
) -> None:
    proposal = active_proposal()
    controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.FOR)
    controller.cast_vote(CAROL, proposal.proposal_id, VoteChoice.AGAINST)
    notifications: list[int] = []
    sweeper = DeadlineSweeper(controller=controller, on_closed=lambda: notifications.append(1))

    assert asyncio.run(sweeper.run_once()) == ()
    assert notifications == []

    clock.advance(timedelta(days=8))
    closed = asyncio.run(sweeper.run_once())

    assert [item.status for item in closed] == [ProposalStatus.REJECTED]
    assert notifications == [1]
    assert asyncio.run(sweeper.run_once()) == ()


class _FlakyController:
    def __init__(self, closed: tuple[Proposal, ...]) -> None:
        self.closed = closed
        self.calls = 0

    def sweep(self) -> tuple[Proposal, ...]:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("registry unavailable")
        return self.closed


def test_run_forever_survives_failing_cycles(
    active_proposal: Callable[..., Proposal],
) -> None:
    controller = _FlakyController((active_proposal(),))

    def persist() -> None:
        raise OSError("disk full")

    sweeper = DeadlineSweeper(
        controller=controller,  # type: ignore[arg-type]
        interval_seconds=0.01,
        on_closed=persist,
    )

    async def scenario() -> bool:
        task = asyncio.create_task(sweeper.run_forever())
        for _ in range(200):
            if controller.calls >= 3:
                break
            await asyncio.sleep(0.01)
        still_running = not task.done()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return still_running

    assert asyncio.run(scenario()) is True
    assert controller.calls >= 3
