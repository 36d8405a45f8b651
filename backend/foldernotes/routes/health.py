"""
FolderNotes Backend — Health Check Route
=========================================

What:  Liveness probe for Docker and load balancers.
How:   Answers {"status": "ok"} whenever the process can serve HTTP. Store
       reachability is not part of the answer; store failures show up as
       500s on the API routes.
"""

from fastapi import APIRouter

from foldernotes.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
