"""Pydantic schemas for Task-It."""
