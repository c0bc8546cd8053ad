"""
Declarative request validation.

A request schema is a pydantic model. Pydantic checks presence and types;
string/number constraints are attached to fields as ``Rule`` objects inside
``Annotated`` so that every failing rule is reported, not just the first one
per field::

    class Signup(RequestSchema):
        password: Annotated[str, MinLength(6, "Too short"), Pattern(r"[0-9]", "Needs a digit")]

``validate(Signup, payload)`` returns the model (unknown keys dropped) or raises
``ValidationFailed`` with one ``{field, message}`` entry per violation.
"""

import re
from datetime import date, datetime
from typing import Any, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from employee_portal.core.errors import ValidationFailed, field_error

DATE_RE = r"^\d{4}-\d{2}-\d{2}$"
TIMESTAMP_RE = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$"

S = TypeVar("S", bound="RequestSchema")


class RequestSchema(BaseModel):
    # camelCase on the wire, snake_case in code
    model_config = ConfigDict(alias_generator=to_camel, strict=True, extra="ignore")


class Rule:
    def __init__(self, message: str):
        self.message = message

    def check(self, value: Any) -> bool:
        raise NotImplementedError


class MinLength(Rule):
    def __init__(self, size: int, message: str):
        super().__init__(message)
        self.size = size

    def check(self, value: Any) -> bool:
        return len(value) >= self.size


class MaxLength(Rule):
    def __init__(self, size: int, message: str):
        super().__init__(message)
        self.size = size

    def check(self, value: Any) -> bool:
        return len(value) <= self.size


class Minimum(Rule):
    def __init__(self, bound: float, message: str):
        super().__init__(message)
        self.bound = bound

    def check(self, value: Any) -> bool:
        return value >= self.bound


class Pattern(Rule):
    """Passes when the regex matches anywhere in the value (``re.search``)."""

    def __init__(self, pattern: str, message: str):
        super().__init__(message)
        self.regex = re.compile(pattern)

    def check(self, value: Any) -> bool:
        return self.regex.search(value) is not None


class Email(Rule):
    """Address syntax as checked by email-validator; no DNS lookups."""

    def __init__(self, message: str = "Invalid email address"):
        super().__init__(message)

    def check(self, value: Any) -> bool:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


class DateString(Pattern):
    """``YYYY-MM-DD`` that is also a real calendar date."""

    def __init__(self, message: str):
        super().__init__(DATE_RE, message)

    def check(self, value: Any) -> bool:
        if not super().check(value):
            return False
        try:
            date.fromisoformat(value)
        except ValueError:
            return False
        return True


class Timestamp(Pattern):
    """ISO 8601 UTC timestamp with milliseconds, e.g. ``2024-01-31T09:00:00.000Z``."""

    def __init__(self, message: str = "Invalid date format"):
        super().__init__(TIMESTAMP_RE, message)

    def check(self, value: Any) -> bool:
        if not super().check(value):
            return False
        try:
            parse_timestamp(value)
        except ValueError:
            return False
        return True


class OneOf(Rule):
    def __init__(self, choices, message: str):
        super().__init__(message)
        self.choices = frozenset(choices)

    def check(self, value: Any) -> bool:
        return value in self.choices


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _field_path(loc) -> str:
    return ".".join(str(p) for p in loc)


def validate(schema: type[S], payload: Any) -> S:
    if not isinstance(payload, dict):
        raise ValidationFailed(details=[field_error("body", "Expected an object")])

    type_errors: dict[str, list[dict[str, str]]] = {}
    other_errors: list[dict[str, str]] = []
    instance = None
    try:
        instance = schema.model_validate(payload)
    except ValidationError as exc:
        for err in exc.errors():
            message = "Required" if err["type"] == "missing" else err["msg"]
            entry = field_error(_field_path(err["loc"]), message)
            if err["loc"]:
                type_errors.setdefault(str(err["loc"][0]), []).append(entry)
            else:
                other_errors.append(entry)

    # Walk fields in declaration order so the error list is stable.
    errors: list[dict[str, str]] = []
    for name, info in schema.model_fields.items():
        key = info.alias or name
        if key in type_errors:
            errors.extend(type_errors[key])
            continue
        value = payload.get(key)
        if value is None:
            continue
        for rule in info.metadata:
            if isinstance(rule, Rule) and not rule.check(value):
                errors.append(field_error(key, rule.message))
    errors.extend(other_errors)

    if errors:
        raise ValidationFailed(details=errors)
    return instance
