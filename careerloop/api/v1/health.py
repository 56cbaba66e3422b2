from fastapi import APIRouter

from careerloop.core.config import settings

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the service.")
async def health_check():
    return {"status": "healthy", "ai_provider": settings.ai_provider}
