"""
Field rules shared by creation and update paths.

Each function returns the cleaned values and raises one ValidationError that
lists every offending field, so nothing is persisted from a half-valid payload.
"""
from typing import Any, Dict, Mapping
from email_validator import validate_email, EmailNotValidError

from ..core.errors import ValidationError

MIN_PASSWORD_LENGTH = 7
FORBIDDEN_PASSWORD_WORD = "password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Please enter your name")
    return value.strip()


def _clean_email(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Please provide an email address")
    email = normalize_email(value)
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Invalid email format")
    return email


def _clean_password(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Password is required")
    password = value.strip()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if FORBIDDEN_PASSWORD_WORD in password.lower():
        raise ValueError("Password cannot contain the word 'password'")
    return password


def _clean_age(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Age must be a whole number")
    if value < 0:
        raise ValueError("Only positive values for age")
    return value


def _clean_description(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Description is required")
    return value.strip()


def _clean_completed(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError("Completed must be true or false")
    return value


ACCOUNT_RULES = {
    "name": _clean_name,
    "email": _clean_email,
    "password": _clean_password,
    "age": _clean_age,
}

TASK_RULES = {
    "description": _clean_description,
    "completed": _clean_completed,
}


def _apply(rules, fields: Mapping[str, Any]) -> Dict[str, Any]:
    cleaned = {}
    errors = {}
    for name, value in fields.items():
        rule = rules.get(name)
        if rule is None:
            errors[name] = "Unknown field"
            continue
        try:
            cleaned[name] = rule(value)
        except ValueError as e:
            errors[name] = str(e)
    if errors:
        raise ValidationError(errors)
    return cleaned


def clean_account_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return _apply(ACCOUNT_RULES, fields)


def clean_task_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return _apply(TASK_RULES, fields)
