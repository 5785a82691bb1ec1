from fastapi import APIRouter

from apps.api.app.config import APP_NAME
from apps.api.app.schemas import HealthResponse


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    return {"status": "ok", "app": APP_NAME}
