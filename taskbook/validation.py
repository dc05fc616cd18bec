from datetime import date
from enum import Enum
from typing import Tuple, Type

from .config import MAX_TASK_YEAR, MIN_PASSWORD_LENGTH, MIN_TASK_YEAR
from .errors import ValidationError


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def require_fields(**fields: str) -> None:
    """Raise if any of the named string fields is missing or blank."""
    missing = [name for name, value in fields.items() if not value or not str(value).strip()]
    if missing:
        raise ValidationError(f"Required field(s) missing: {', '.join(missing)}")


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
        )


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _choice(value: str, enum_cls: Type[Enum], label: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}' (expected one of: {allowed})")


def validate_status(value: str) -> str:
    return _choice(value, TaskStatus, "status")


def validate_priority(value: str) -> str:
    return _choice(value, TaskPriority, "priority")


def parse_task_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""
    if not isinstance(value, str) or len(value) != 10:
        raise ValidationError(f"Invalid date '{value}' (expected YYYY-MM-DD)")
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}' (expected YYYY-MM-DD)")
    # fromisoformat also takes week dates such as 2024-W10-1
    if parsed.isoformat() != value:
        raise ValidationError(f"Invalid date '{value}' (expected YYYY-MM-DD)")
    return parsed


def month_and_year(value: str) -> Tuple[int, int]:
    parsed = parse_task_date(value)
    return parsed.month, parsed.year


def validate_month_year(month: int, year: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("Invalid month (1-12 required)")
    if isinstance(year, bool) or not isinstance(year, int) or not MIN_TASK_YEAR <= year <= MAX_TASK_YEAR:
        raise ValidationError(f"Invalid year ({MIN_TASK_YEAR}-{MAX_TASK_YEAR} required)")
