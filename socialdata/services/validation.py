"""
Field-level validation for write payloads.

Every ``check_*`` function returns structured FieldError pairs in field
declaration order; the matching ``validate_*`` function returns just the
messages. With ``partial=True`` (edit payloads) absent fields are skipped;
otherwise a missing or blank required field is reported as required.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from socialdata.exceptions import FieldError, ValidationError

PayloadLike = Union[BaseModel, Mapping[str, Any]]

_ABSENT = object()


def _fields(payload: PayloadLike) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=True)
    # Accept both stored (camelCase) and attribute (snake_case) keys
    return {to_snake(key): value for key, value in payload.items()}


def _aware(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_text(
    errors: List[FieldError],
    data: Dict[str, Any],
    field: str,
    label: str,
    partial: bool,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    required: bool = True,
    short_message: Optional[str] = None,
    long_message: Optional[str] = None,
):
    value = data.get(field, _ABSENT)

    if value is _ABSENT or value is None:
        if required and not partial:
            errors.append(FieldError(field, f"{label} is required"))
        return

    # Mapping payloads are unchecked; measure non-strings by their text
    text = value if isinstance(value, str) else str(value)

    if not text.strip():
        if required:
            errors.append(FieldError(field, f"{label} is required"))
        return

    if min_length is not None and len(text) < min_length:
        errors.append(FieldError(field, short_message or f"{label} must be at least {min_length} characters"))
    elif max_length is not None and len(text) > max_length:
        errors.append(FieldError(field, long_message or f"{label} must be less than {max_length} characters"))


def check_user_profile(profile: PayloadLike, partial: bool = False) -> List[FieldError]:
    data = _fields(profile)
    errors: List[FieldError] = []
    _check_text(errors, data, "display_name", "Display name", partial, min_length=2, max_length=50)
    _check_text(errors, data, "bio", "Bio", partial, max_length=500, required=False)
    return errors


def check_post(post: PayloadLike, partial: bool = False) -> List[FieldError]:
    data = _fields(post)
    errors: List[FieldError] = []
    _check_text(errors, data, "title", "Title", partial, min_length=3, max_length=100)
    _check_text(errors, data, "content", "Content", partial, min_length=10, max_length=2000)
    return errors


def check_comment(comment: PayloadLike, partial: bool = False) -> List[FieldError]:
    data = _fields(comment)
    errors: List[FieldError] = []
    _check_text(
        errors, data, "content", "Comment content", partial,
        min_length=1, max_length=500,
        short_message="Comment must have content",
        long_message="Comment must be less than 500 characters",
    )
    return errors


def check_group(group: PayloadLike, partial: bool = False) -> List[FieldError]:
    data = _fields(group)
    errors: List[FieldError] = []
    _check_text(errors, data, "name", "Group name", partial, min_length=3, max_length=50)
    _check_text(errors, data, "description", "Group description", partial, max_length=500)
    return errors


def check_event(event: PayloadLike, partial: bool = False) -> List[FieldError]:
    data = _fields(event)
    errors: List[FieldError] = []
    _check_text(errors, data, "title", "Event title", partial, min_length=3, max_length=100)
    _check_text(errors, data, "description", "Event description", partial, max_length=1000)

    start_date = _aware(data.get("start_date"))
    end_date = _aware(data.get("end_date"))
    if start_date is not None and end_date is not None and start_date >= end_date:
        errors.append(FieldError("end_date", "End date must be after start date"))

    return errors


def check_message(message: PayloadLike, partial: bool = False) -> List[FieldError]:
    data = _fields(message)
    errors: List[FieldError] = []
    _check_text(errors, data, "text", "Message text", partial)
    return errors


def validate_user_profile(profile: PayloadLike, partial: bool = False) -> List[str]:
    return [error.message for error in check_user_profile(profile, partial)]


def validate_post(post: PayloadLike, partial: bool = False) -> List[str]:
    return [error.message for error in check_post(post, partial)]


def validate_comment(comment: PayloadLike, partial: bool = False) -> List[str]:
    return [error.message for error in check_comment(comment, partial)]


def validate_group(group: PayloadLike, partial: bool = False) -> List[str]:
    return [error.message for error in check_group(group, partial)]


def validate_event(event: PayloadLike, partial: bool = False) -> List[str]:
    return [error.message for error in check_event(event, partial)]


def validate_message(message: PayloadLike, partial: bool = False) -> List[str]:
    return [error.message for error in check_message(message, partial)]


def ensure_valid(errors: List[FieldError]):
    """Raise ValidationError when any check failed"""
    if errors:
        raise ValidationError(errors)
