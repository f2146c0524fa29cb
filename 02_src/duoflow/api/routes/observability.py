"""Observability API routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import IApplication
from ...risk import RiskRange


class TraceEventResponse(BaseModel):
    """Response model for trace event."""

    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime


class FindingResponse(BaseModel):
    """Response model for a finding."""

    severity: str
    issue: str
    location: str
    remediation: str
    fixed_code: str | None = None


class RiskPointResponse(BaseModel):
    """Response model for a risk point."""

    timestamp: datetime
    score: int


def create_observability_router(app: IApplication) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/trace-events", response_model=list[TraceEventResponse])
    async def get_trace_events(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
        event_type: str | None = Query(None, description="Filter by event type"),
        actor: str | None = Query(None, description="Filter by actor"),
    ) -> list[dict]:
        """Get trace events with optional filters."""
        try:
            after_dt = None
            if after:
                try:
                    after_dt = datetime.fromisoformat(after)
                except ValueError:
                    raise HTTPException(
                        status_code=400, detail="Invalid after timestamp format"
                    )

            event_types = [event_type] if event_type else None

            events = await app.storage.get_trace_events(
                after=after_dt,
                event_types=event_types,
                actor=actor,
                limit=limit,
            )

            return [
                {
                    "id": e.id,
                    "event_type": e.event_type,
                    "actor": e.actor,
                    "data": e.data,
                    "timestamp": e.timestamp.isoformat(),
                }
                for e in events
            ]

        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.get("/findings", response_model=list[FindingResponse])
    async def get_findings() -> list[dict]:
        """Findings of the current run in arrival order."""
        return [finding.to_dict() for finding in app.bus.findings]

    @router.get("/risk", response_model=list[RiskPointResponse])
    async def get_risk(
        range_: RiskRange = Query(RiskRange.LIVE, alias="range"),
    ) -> list[dict]:
        """Risk score series for the given range."""
        return [
            {"timestamp": point.timestamp, "score": point.score}
            for point in app.risk.window(range_)
        ]

    return router
