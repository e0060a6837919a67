"""Study Tracker — study session timer, history and dashboard backend."""

__version__ = "1.0.0"
