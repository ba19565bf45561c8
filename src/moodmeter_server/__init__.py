"""moodmeter-server - personal mood tracking API."""

__version__ = "0.1.0"
