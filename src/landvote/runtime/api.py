from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from landvote.config import AppSettings, get_settings
from landvote.domain.proposal import ProposalDraft
from landvote.domain.roles import Role
from landvote.domain.status import ProposalStatus
from landvote.domain.vote import VoteChoice
from landvote.errors import GovernanceError
from landvote.observability.logging import configure_logging
from landvote.orchestration.lifecycle import LifecycleController
from landvote.persistence.state_file import load_session, save_session
from landvote.runtime.sweeper import DeadlineSweeper


class ProposalDraftIn(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    region: str = ""
    deadline: datetime | None = None
    proposer: str
    role_gate: Role = Role.PROPOSER
    quorum: int | None = Field(default=None, ge=1)


class ActorIn(BaseModel):
    actor: str


class VoteIn(BaseModel):
    identity: str
    choice: VoteChoice


def build_api_app(
    settings: AppSettings,
    controller: LifecycleController,
    *,
    on_change: Callable[[], None] | None = None,
    sweeper: DeadlineSweeper | None = None,
) -> FastAPI:
    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        task = asyncio.create_task(sweeper.run_forever()) if sweeper is not None else None
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    app = FastAPI(title=f"{settings.governance_name}-governance", version="0.1.0", lifespan=lifespan)

    def committed(payload: Any) -> Any:
        if on_change is not None:
            on_change()
        return payload

    @app.exception_handler(GovernanceError)
    async def governance_error_handler(_: Request, exc: GovernanceError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.get("/livez")
    def livez() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz() -> dict[str, Any]:
        return {
            "status": "ok",
            "governance_name": settings.governance_name,
            "quorum_threshold": settings.quorum_threshold,
            "tie_policy": settings.tie_policy.value,
            "proposals": len(controller.list_proposals()),
        }

    @app.post("/proposals", status_code=201)
    def create_proposal(body: ProposalDraftIn) -> dict[str, Any]:
        draft = ProposalDraft(**body.model_dump())
        return committed(controller.create_proposal(draft).as_dict())

    @app.get("/proposals")
    def list_proposals(
        status: ProposalStatus | None = None,
        region: str | None = None,
    ) -> list[dict[str, Any]]:
        return [proposal.as_dict() for proposal in controller.list_proposals(status=status, region=region)]

    @app.get("/proposals/{proposal_id}")
    def get_proposal(proposal_id: str) -> dict[str, Any]:
        return controller.get_proposal(proposal_id).as_dict()

    @app.delete("/proposals/{proposal_id}")
    def discard_proposal(proposal_id: str, actor: str) -> dict[str, str]:
        return committed({"discarded": controller.discard_proposal(proposal_id, actor).proposal_id})

    @app.post("/proposals/{proposal_id}/submit")
    def submit_proposal(proposal_id: str, body: ActorIn) -> dict[str, Any]:
        return committed(controller.submit_proposal(proposal_id, body.actor).as_dict())

    @app.post("/proposals/{proposal_id}/approve")
    def approve_proposal(proposal_id: str, body: ActorIn) -> dict[str, Any]:
        return committed(controller.approve_proposal(proposal_id, body.actor).as_dict())

    @app.post("/proposals/{proposal_id}/advance")
    def advance_proposal(proposal_id: str) -> dict[str, Any]:
        return committed(controller.advance_proposal(proposal_id).as_dict())

    @app.get("/proposals/{proposal_id}/eligibility")
    def eligibility(proposal_id: str, identity: str) -> dict[str, Any]:
        return controller.eligibility(identity, proposal_id).as_dict()

    @app.post("/proposals/{proposal_id}/votes", status_code=201)
    def cast_vote(proposal_id: str, body: VoteIn) -> dict[str, Any]:
        return committed(controller.cast_vote(body.identity, proposal_id, body.choice).as_dict())

    @app.get("/proposals/{proposal_id}/tally")
    def tally(proposal_id: str) -> dict[str, Any]:
        return controller.tally(proposal_id).as_dict()

    @app.get("/proposals/{proposal_id}/parcels")
    def parcel_status(proposal_id: str, identity: str) -> dict[str, str]:
        return controller.parcel_status(identity, proposal_id)

    return app


def default_api_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    path = Path(settings.state_path)
    session = load_session(path, settings)

    def persist() -> None:
        save_session(path, session)

    return build_api_app(
        settings,
        session.controller,
        on_change=persist,
        sweeper=DeadlineSweeper(
            controller=session.controller,
            interval_seconds=settings.sweep_interval_seconds,
            on_closed=persist,
        ),
    )
