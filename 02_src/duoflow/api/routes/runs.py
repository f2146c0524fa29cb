"""Run and trigger API routes."""

from datetime import datetime

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import IApplication
from ...errors import RunInProgressError
from ...models import TriggerType
from ...registry import INITIAL_CODE_SAMPLE


class RunRequest(BaseModel):
    """Request model for starting a run."""

    code: str | None = None


class RunStartedResponse(BaseModel):
    """Response model for a started run."""

    run_id: str


class TriggerModel(BaseModel):
    """A trigger as seen by the dashboard."""

    id: str
    type: TriggerType
    source: str
    timestamp: datetime


class RunStateResponse(BaseModel):
    """Response model for the current run state."""

    run_id: str | None
    settled: bool
    pending: list[TriggerModel]
    statuses: dict[str, str]
    findings_count: int
    risk_score: int


class TriggerRequest(BaseModel):
    """Request model for injecting a trigger."""

    type: TriggerType
    source: str = "MANUAL"


class TriggerAcceptedResponse(BaseModel):
    """Response model for an accepted trigger."""

    trigger_id: str


def create_runs_router(app: IApplication) -> APIRouter:
    """Create runs router."""
    router = APIRouter(prefix="/api", tags=["runs"])

    @router.post("/runs", response_model=RunStartedResponse, status_code=202)
    async def start_run(request: RunRequest) -> dict:
        """Start the analysis pipeline on the submitted code."""
        code = request.code if request.code is not None else INITIAL_CODE_SAMPLE
        try:
            run_id = app.launch_run(code)
        except RunInProgressError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {"run_id": run_id}

    @router.get("/runs/current", response_model=RunStateResponse)
    async def current_run() -> dict:
        """Current run state: queue, statuses and findings."""
        bus = app.bus
        return {
            "run_id": bus.run_id,
            "settled": bus.settled,
            "pending": [
                {
                    "id": trigger.id,
                    "type": trigger.type,
                    "source": trigger.source,
                    "timestamp": trigger.timestamp,
                }
                for trigger in bus.pending
            ],
            "statuses": {
                agent_id: status.value for agent_id, status in bus.statuses.items()
            },
            "findings_count": len(bus.findings),
            "risk_score": app.risk.current_score,
        }

    @router.post("/triggers", response_model=TriggerAcceptedResponse, status_code=202)
    async def inject_trigger(request: TriggerRequest) -> dict:
        """Inject a trigger into the bus."""
        try:
            trigger = await app.bus.submit(request.type, request.source)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"trigger_id": trigger.id}

    return router
