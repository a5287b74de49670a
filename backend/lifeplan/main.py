"""Main FastAPI application for the LifePlan backend."""
from fastapi import FastAPI, Request

from lifeplan.api.routes.daily_tasks import router as daily_tasks_router
from lifeplan.api.routes.plan import router as plan_router
from lifeplan.api.routes.profile import router as profile_router
from lifeplan.core.config import settings
from lifeplan.core.logging import configure_logging
from lifeplan.core.middleware import RequestIDMiddleware
from lifeplan.observability.client import init_opik
from lifeplan.observability.tracing import trace

configure_logging(log_level=settings.log_level, debug=settings.debug)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(profile_router)
app.include_router(plan_router)
app.include_router(daily_tasks_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
