"""Database utilities and models."""

from lifeplan.db.base import Base
from lifeplan.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
