"""HTTP routes for the competition mentor.

Authentication happens upstream; the caller's user id arrives in the
``X-User-Id`` header (or the path for ``/users`` routes).
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Request, Response
from fastapi.responses import JSONResponse

from src.shared.db import quick_check
from src.services.competitions.schemas import (
    ChatAnswer,
    Competition,
    CredentialsRequest,
    CustomCompetitionRequest,
    DemoAnalysis,
    DemoAnalysisRequest,
    MentorChatRequest,
    ProgressRequest,
    ResetStuckRequest,
    TutorChatRequest,
    UserSettings,
)
from src.services.competitions.services.factory import MentorServices


logger = logging.getLogger(__name__)

competitions_router = APIRouter(prefix="/competitions", tags=["competitions"])
chat_router = APIRouter(prefix="/chat", tags=["chat"])
users_router = APIRouter(prefix="/users", tags=["users"])
demo_router = APIRouter(prefix="/demo", tags=["demo"])
health_router = APIRouter(prefix="/health", tags=["health"])


def get_services(request: Request) -> MentorServices:
    return request.app.state.services


# ==================== Competitions ====================

@competitions_router.get("", response_model=List[Competition])
async def list_competitions(services: MentorServices = Depends(get_services)) -> List[Competition]:
    """Cached competition listing with analysis state."""
    return await services.analysis.get_cached_competitions()


@competitions_router.post("/refresh")
async def refresh_competitions(
    x_user_id: str = Header(...),
    services: MentorServices = Depends(get_services),
) -> JSONResponse:
    """Fetch the live listing from Kaggle.

    ``degraded`` is true when Kaggle failed and the built-in list is shown.
    """
    result = await services.analysis.refresh_competitions(x_user_id)
    return JSONResponse(content=result.model_dump(mode="json"))


@competitions_router.post("/custom", response_model=Competition, status_code=202)
async def submit_custom_competition(
    body: CustomCompetitionRequest,
    x_user_id: str = Header(...),
    services: MentorServices = Depends(get_services),
) -> Competition:
    """Register a competition by URL and start its analysis."""
    return await services.analysis.submit_custom_competition(x_user_id, str(body.url))


@competitions_router.post("/reset-stuck")
async def reset_stuck_competitions(
    body: Optional[ResetStuckRequest] = None,
    services: MentorServices = Depends(get_services),
) -> JSONResponse:
    threshold = body.threshold_seconds if body is not None else None
    count = await services.analysis.reset_stuck_competitions(threshold)
    return JSONResponse(content={"reset": count})


@competitions_router.get("/context")
async def download_context_file(
    url: str = Query(..., min_length=1),
    x_user_id: Optional[str] = Header(default=None),
    services: MentorServices = Depends(get_services),
) -> Response:
    """Download the concatenated notebooks of a competition as text."""
    credentials = await services.credential_resolver.resolve(x_user_id)
    context_file = await services.context_builder.build(url, credentials)
    return Response(
        content=context_file.content,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{context_file.file_name}"'},
    )


@competitions_router.get("/{competition_id}", response_model=Competition)
async def get_competition(
    competition_id: str,
    services: MentorServices = Depends(get_services),
) -> Competition:
    """Competition with its analysis; poll this while an analysis runs."""
    return await services.analysis.get_competition(competition_id)


# ==================== Chat ====================

@chat_router.post("/mentor", response_model=ChatAnswer)
async def ask_mentor(
    body: MentorChatRequest,
    services: MentorServices = Depends(get_services),
) -> ChatAnswer:
    answer = await services.mentor.ask(body.question, body.competition_context, body.history)
    return ChatAnswer(answer=answer)


@chat_router.post("/tutor", response_model=ChatAnswer)
async def ask_tutor(
    body: TutorChatRequest,
    x_user_id: Optional[str] = Header(default=None),
    services: MentorServices = Depends(get_services),
) -> ChatAnswer:
    """Tutor chat; stored interests are used when the request names none."""
    interests = body.interests
    if not interests and x_user_id:
        interests = (await services.analysis.get_user(x_user_id)).interests
    answer = await services.tutor.ask(body.question, interests, body.history)
    return ChatAnswer(answer=answer)


# ==================== Users ====================

@users_router.get("/{user_id}", response_model=UserSettings)
async def get_user(user_id: str, services: MentorServices = Depends(get_services)) -> UserSettings:
    return await services.analysis.get_user(user_id)


@users_router.put("/{user_id}/credentials", response_model=UserSettings)
async def save_credentials(
    user_id: str,
    body: CredentialsRequest,
    services: MentorServices = Depends(get_services),
) -> UserSettings:
    return await services.analysis.save_credentials(user_id, body.username, body.key)


@users_router.post("/{user_id}/interests/{interest}", response_model=UserSettings)
async def add_interest(
    user_id: str,
    interest: str,
    services: MentorServices = Depends(get_services),
) -> UserSettings:
    return await services.analysis.add_interest(user_id, interest)


@users_router.delete("/{user_id}/interests/{interest}", response_model=UserSettings)
async def remove_interest(
    user_id: str,
    interest: str,
    services: MentorServices = Depends(get_services),
) -> UserSettings:
    return await services.analysis.remove_interest(user_id, interest)


@users_router.put("/{user_id}/progress", response_model=UserSettings)
async def save_progress(
    user_id: str,
    body: ProgressRequest,
    services: MentorServices = Depends(get_services),
) -> UserSettings:
    return await services.analysis.save_progress(
        user_id, body.xp, body.level, body.competitions_analysed
    )


# ==================== Demo ====================

@demo_router.get("/{competition_id}", response_model=DemoAnalysis)
async def get_demo(
    competition_id: str,
    services: MentorServices = Depends(get_services),
) -> DemoAnalysis:
    """Stored demo analysis; 404 until one has been saved."""
    return await services.demos.get_demo(competition_id)


@demo_router.put("/{competition_id}", response_model=DemoAnalysis)
async def save_demo(
    competition_id: str,
    body: DemoAnalysisRequest,
    services: MentorServices = Depends(get_services),
) -> DemoAnalysis:
    return await services.demos.save_demo(
        competition_id, body.summary, body.deconstructed_notebooks
    )


# ==================== Health ====================

@health_router.get("")
async def health_check(services: MentorServices = Depends(get_services)) -> JSONResponse:
    """Health of Kaggle, the LLM provider and (when configured) the database.

    Returns 200 when every component is healthy, 503 otherwise.
    """
    checks = await services.analysis.health_check()
    if services.session_factory is not None:
        checks["database"] = await quick_check(services.session_factory)

    healthy = all(checks.values())
    if not healthy:
        logger.warning(f"Health check failed: {checks}")
    return JSONResponse(
        content={
            "status": "healthy" if healthy else "unhealthy",
            "checks": checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        status_code=200 if healthy else 503,
    )


@health_router.get("/liveness")
async def liveness_check() -> JSONResponse:
    """Returns 200 if the application is running (no dependency checks)."""
    return JSONResponse(
        content={"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()},
        status_code=200,
    )


__all__ = [
    "competitions_router",
    "chat_router",
    "users_router",
    "demo_router",
    "health_router",
    "get_services",
]
