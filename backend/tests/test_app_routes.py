"""Regression tests for application route registration."""
from fastapi.routing import APIRoute

from lifeplan.main import app

EXPECTED_ROUTES = {
    ("/profile", "POST"),
    ("/profile/me", "GET"),
    ("/plan/generate", "POST"),
    ("/plan", "GET"),
    ("/plan/today", "GET"),
    ("/plan/comprehensive", "GET"),
    ("/plan/comprehensive", "POST"),
    ("/plan/update-task", "POST"),
    ("/ai/daily-tasks", "POST"),
    ("/ai/daily-tasks/toggle", "POST"),
    ("/health", "GET"),
}


def test_routes_registered_once() -> None:
    """Every endpoint is mounted exactly once."""
    registered = [
        (route.path, method)
        for route in app.routes
        if isinstance(route, APIRoute)
        for method in route.methods
    ]
    for expected in EXPECTED_ROUTES:
        assert registered.count(expected) == 1, expected
