"""Create, update and read the one-to-one lifestyle profile."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lifeplan.db.models.profile import Profile
from lifeplan.db.models.user import User
from lifeplan.services.profile_context import build_profile_context

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "work_study",
    "hobbies",
    "sports",
    "location",
    "age_years",
    "height_cm",
    "weight_kg",
    "reading",
)


def get_profile(db: Session, user_id: UUID) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user_id).one_or_none()


def upsert_profile(db: Session, user_id: UUID, data: Mapping[str, Any]) -> Profile:
    """Write profile fields in place and refresh the derived AI context."""
    try:
        _get_or_create_user(db, user_id)
        profile = get_profile(db, user_id)
        created = profile is None
        if created:
            profile = Profile(user_id=user_id)
            db.add(profile)
        for field_name in PROFILE_FIELDS:
            if field_name in data:
                setattr(profile, field_name, data[field_name])
        profile.ai_context = build_profile_context(profile)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(profile)
    logger.info("Profile %s for user %s", "created" if created else "updated", user_id)
    return profile


def _get_or_create_user(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        existing = db.get(User, user_id)
        if existing:
            return existing
        raise
    return user
