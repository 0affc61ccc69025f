"""API routers for Task-It."""
