"""Core modules for Task-It."""
