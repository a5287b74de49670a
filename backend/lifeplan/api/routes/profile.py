"""Profile capture routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from lifeplan.api.schemas.profile import ProfilePayload, ProfileRequest, ProfileResponse
from lifeplan.core.context import bind_user
from lifeplan.db.deps import get_db
from lifeplan.db.models.profile import Profile
from lifeplan.observability.metrics import log_metric
from lifeplan.observability.tracing import trace
from lifeplan.services.profile_service import get_profile, upsert_profile

router = APIRouter()


@router.get("/profile/me", response_model=ProfileResponse, tags=["profile"])
def read_profile(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the profile"),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    """Return the stored profile for a user."""
    request_id = getattr(http_request.state, "request_id", None)
    with bind_user(user_id):
        profile = get_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    return ProfileResponse(
        message="Profile retrieved successfully",
        profile=_serialize_profile(profile),
        request_id=request_id or "",
    )


@router.post("/profile", response_model=ProfileResponse, tags=["profile"])
def save_profile(
    payload: ProfileRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> ProfileResponse:
    """Create or update the user's lifestyle profile."""
    request_id = getattr(http_request.state, "request_id", None)
    data = {
        "work_study": payload.work_study,
        "hobbies": payload.hobbies,
        "sports": payload.sports,
        "location": payload.location,
        "weight_kg": payload.weight,
        "height_cm": payload.height,
        "age_years": payload.age,
        "reading": payload.reading,
    }

    with bind_user(payload.user_id), trace("profile.save", metadata={"route": "/profile"}):
        profile = upsert_profile(db, payload.user_id, data)

    log_metric("profile.save.success", 1, metadata={"user_id": str(payload.user_id)})
    return ProfileResponse(
        message="Profile saved successfully",
        profile=_serialize_profile(profile),
        request_id=request_id or "",
    )


def _serialize_profile(profile: Profile) -> ProfilePayload:
    return ProfilePayload(
        id=profile.id,
        user_id=profile.user_id,
        work_study=profile.work_study,
        hobbies=profile.hobbies,
        sports=profile.sports,
        location=profile.location,
        weight=profile.weight_kg,
        height=profile.height_cm,
        age=profile.age_years,
        reading=profile.reading,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
