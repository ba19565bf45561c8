"""Application services."""

from moodmeter_server.services.account import AccountService
from moodmeter_server.services.history import HistoryService
from moodmeter_server.services.metrics import MetricsService
from moodmeter_server.services.mood import MoodService

__all__ = [
    "AccountService",
    "HistoryService",
    "MetricsService",
    "MoodService",
]
