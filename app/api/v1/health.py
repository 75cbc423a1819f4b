"""Health check endpoint with database connectivity and system-role checks."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse
from app.services.roles import system_roles_seeded

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    Return service health, database connectivity, and whether the 'admin' and
    'user' roles exist (admin access is impossible without them).
    """
    if not check_db_connected(db):
        return HealthResponse(environment=settings.APP_ENV, database="disconnected")

    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected",
        system_roles_seeded=system_roles_seeded(db),
    )
