"""Shared pydantic base for request/response bodies exchanged with the Angular client."""

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; buildable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def validate_http_url(value: str | None, field_name: str) -> str | None:
    """Normalize an optional URL; blank becomes None, non-http(s) schemes are rejected."""
    if value is None or not value.strip():
        return None
    s = value.strip()
    lowered = s.lower()
    if not (lowered.startswith("http://") or lowered.startswith("https://")):
        raise ValueError(f"{field_name} must use http or https")
    return s


EMAIL_MAX_LEN = 200


def validate_email_address(value: str) -> str:
    """Check syntax and length; the address is returned as sent, not normalized."""
    s = value.strip()
    if len(s) > EMAIL_MAX_LEN:
        raise ValueError(f"email cannot exceed {EMAIL_MAX_LEN} characters")
    try:
        validate_email(s, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"invalid email address: {e}") from e
    return s
