"""
Shared base for partial-update request bodies.
"""
from typing import Any, Dict, Mapping
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import InvalidUpdateError, ValidationError


class UpdateRequest(BaseModel):
    """
    A partial update with named optional fields.

    Unknown keys are kept aside in ``model_extra`` instead of failing parsing so
    that ``changes()`` can reject the whole update set with one uniform error.
    """

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UpdateRequest":
        """Build an update from a raw mapping, reporting type errors per field"""
        if isinstance(payload, cls):
            return payload
        unknown = set(payload) - set(cls.model_fields)
        if unknown or not payload:
            raise InvalidUpdateError(_unknown_fields(unknown))
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise ValidationError(field_errors(e)) from e

    def changes(self) -> Dict[str, Any]:
        """
        Return the populated fields, or raise if the set is empty or names a
        field outside the allow-list.
        """
        unknown = set(self.model_extra or {})
        if unknown or not self.model_fields_set:
            raise InvalidUpdateError(_unknown_fields(unknown))
        return {name: getattr(self, name) for name in self.model_fields_set}


def _unknown_fields(names) -> Dict[str, str]:
    if not names:
        return {"_": "No fields to update"}
    return {name: "Field cannot be updated" for name in sorted(names)}


def field_errors(exc) -> Dict[str, str]:
    """Flatten a pydantic or request validation error into ``{field: message}``"""
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.setdefault(".".join(loc) or "_", error.get("msg", "Invalid value"))
    return errors
