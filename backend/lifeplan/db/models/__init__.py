"""ORM models exposed for metadata discovery."""
from lifeplan.db.models.action_log import PlanActionLog
from lifeplan.db.models.plan_document import PlanDocument
from lifeplan.db.models.profile import Profile
from lifeplan.db.models.user import User

__all__ = [
    "PlanActionLog",
    "PlanDocument",
    "Profile",
    "User",
]
