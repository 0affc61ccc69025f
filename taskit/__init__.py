"""Task-It - task management service with account sessions."""

__version__ = "1.0.0"
