"""API routes."""

from moodmeter_server.api.account import account_router
from moodmeter_server.api.health import health_router
from moodmeter_server.api.history import history_router
from moodmeter_server.api.metrics import metrics_router
from moodmeter_server.api.mood import mood_router

# - health_router: /health - no auth needed
# - metrics_router: /metrics - no auth, public users only
# - account_router, mood_router, history_router: bearer token or public username
api_routers = [
    health_router,
    metrics_router,
    account_router,
    mood_router,
    history_router,
]

__all__ = ["api_routers"]
