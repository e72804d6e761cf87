from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from landvote.config import get_settings
from landvote.domain.proposal import Proposal
from landvote.observability.logging import configure_logging, get_logger
from landvote.orchestration.lifecycle import LifecycleController
from landvote.persistence.state_file import load_session, save_session


@dataclass(slots=True)
class DeadlineSweeper:
    controller: LifecycleController
    interval_seconds: float = 30.0
    on_closed: Callable[[], None] | None = None

    async def run_once(self) -> tuple[Proposal, ...]:
        # sweep() takes thread locks and on_closed writes to disk.
        closed = await asyncio.to_thread(self.controller.sweep)
        logger = get_logger("deadline_sweeper")
        for proposal in closed:
            logger.info(
                "proposal_closed",
                proposal_id=proposal.proposal_id,
                status=proposal.status.value,
            )
        if closed and self.on_closed is not None:
            await asyncio.to_thread(self.on_closed)
        return closed

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                get_logger("deadline_sweeper").exception("deadline_sweep_failed")
            await asyncio.sleep(self.interval_seconds)


def _default_sweeper() -> DeadlineSweeper:
    settings = get_settings()
    path = Path(settings.state_path)
    session = load_session(path, settings)
    return DeadlineSweeper(
        controller=session.controller,
        interval_seconds=settings.sweep_interval_seconds,
        on_closed=lambda: save_session(path, session),
    )


async def run_sweeper() -> None:
    configure_logging(get_settings().log_level)
    await _default_sweeper().run_forever()


if __name__ == "__main__":
    asyncio.run(run_sweeper())
