"""Agent catalogue API routes."""

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ...app import IApplication
from ...models import AgentRole, TriggerType


class AgentResponse(BaseModel):
    """Response model for an agent and its current status."""

    id: str
    name: str
    role: AgentRole
    description: str
    subscriptions: list[TriggerType]
    status: str


def create_agents_router(app: IApplication) -> APIRouter:
    """Create agents router."""
    router = APIRouter(prefix="/api/agents", tags=["agents"])

    @router.get("", response_model=list[AgentResponse])
    async def list_agents(
        role: AgentRole | None = Query(None, description="Filter by role"),
    ) -> list[dict]:
        """List agents, optionally filtered by role."""
        statuses = app.bus.statuses
        agents = app.registry.by_role(role) if role else list(app.registry)
        return [
            {
                "id": agent.id,
                "name": agent.name,
                "role": agent.role,
                "description": agent.description,
                "subscriptions": sorted(agent.subscriptions, key=lambda t: t.value),
                "status": statuses[agent.id].value,
            }
            for agent in agents
        ]

    @router.get("/roles", response_model=dict[str, int])
    async def role_counts() -> dict:
        """Agent counts per role."""
        return app.registry.role_counts()

    return router
