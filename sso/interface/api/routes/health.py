"""Health check routes."""

from datetime import UTC, datetime

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from sso.config import Settings

router = APIRouter(tags=["health"], route_class=DishkaRoute)

UNSET_CREDENTIAL = "CHANGE_ME_IN_PRODUCTION"


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    dingtalk_enabled: bool
    dingtalk_configured: bool
    tracking_organizations: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: FromDishka[Settings]) -> HealthResponse:
    """Liveness plus a summary of the DingTalk login configuration."""
    dingtalk = settings.dingtalk
    configured = all(
        value and value != UNSET_CREDENTIAL
        for value in (dingtalk.client_id, dingtalk.client_secret)
    )
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        dingtalk_enabled=dingtalk.enabled,
        dingtalk_configured=configured,
        tracking_organizations=dingtalk.track_organizations,
    )
