"""Persistence adapter for plan documents keyed by (user, date key)."""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lifeplan.db.models.plan_document import PlanDocument
from lifeplan.db.models.user import User
from lifeplan.services.errors import PlanDataCorruptedError

logger = logging.getLogger(__name__)


def daily_key(day: date) -> str:
    return day.isoformat()


def long_term_key(year: int) -> str:
    return f"long-term-{year}"


def monthly_key(year: int, month: int) -> str:
    return f"monthly-{year}-{month:02d}"


def today_in(timezone: str) -> date:
    """Current calendar day as seen from ``timezone``."""
    return datetime.now(ZoneInfo(timezone)).date()


class PlanStore:
    """Upsert/get access to ``daily_plans`` rows.

    ``upsert`` replaces the whole document and commits; callers never observe a
    half-written plan. ``get`` returns None when nothing is stored, leaving any
    default construction to the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: UUID, date_key: str) -> Optional[PlanDocument]:
        return (
            self.db.query(PlanDocument)
            .filter(PlanDocument.user_id == user_id, PlanDocument.date_key == date_key)
            .one_or_none()
        )

    def upsert(self, user_id: UUID, date_key: str, timezone: str, payload: Dict[str, Any]) -> PlanDocument:
        plan_json = json.dumps(payload)
        try:
            document = self._write(user_id, date_key, timezone, plan_json)
            self.db.commit()
        except IntegrityError:
            # Another request inserted the same key first; apply ours on top.
            self.db.rollback()
            logger.info("Concurrent insert for plan %s; retrying as update", date_key)
            try:
                document = self._write(user_id, date_key, timezone, plan_json)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(document)
        return document

    def _write(self, user_id: UUID, date_key: str, timezone: str, plan_json: str) -> PlanDocument:
        document = self.get(user_id, date_key)
        if document is None:
            self.ensure_user(user_id)
            document = PlanDocument(user_id=user_id, date_key=date_key, timezone=timezone, plan_json=plan_json)
            self.db.add(document)
        else:
            document.timezone = timezone
            document.plan_json = plan_json
        self.db.flush()
        return document

    def ensure_user(self, user_id: UUID) -> None:
        if self.db.get(User, user_id) is None:
            self.db.add(User(id=user_id))
            self.db.flush()

    @staticmethod
    def load_payload(document: PlanDocument) -> Dict[str, Any]:
        """Decode a stored payload; corruption is an error, never an empty plan."""
        try:
            payload = json.loads(document.plan_json)
        except (TypeError, json.JSONDecodeError) as exc:
            raise PlanDataCorruptedError(document.date_key, str(exc)) from exc
        if not isinstance(payload, dict):
            raise PlanDataCorruptedError(document.date_key, f"expected an object, got {type(payload).__name__}")
        return payload

