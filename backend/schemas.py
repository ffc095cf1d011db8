import datetime as dt
import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from sqlmodel import SQLModel

# Hours 0-23 (one or two digits), minutes 00-59
TIME_SPENT_PATTERN = re.compile(r"([0-1]?[0-9]|2[0-3]):[0-5][0-9]")

ErrorKind = Literal["validation", "auth_required", "not_found", "persistence"]


class EntryDraft(BaseModel):
    """Form payload for creating or editing a timeline entry.

    Fields default to empty so that every missing value is reported through
    the same human-readable messages rather than pydantic's generic ones.
    """

    date: dt.date | None = None
    client: str = ""
    task: str = ""
    docket_number: str | None = None
    description: str = ""
    time_spent: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def truncate_to_day(cls, v):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v).date()
        return v

    @field_validator("docket_number")
    @classmethod
    def blank_docket_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_required(self):
        problems = []
        if self.date is None:
            problems.append("Date is required.")
        if not self.client.strip():
            problems.append("Client is required.")
        if not self.task.strip():
            problems.append("Task is required.")
        if not self.description.strip():
            problems.append("Description is required.")
        if not TIME_SPENT_PATTERN.fullmatch(self.time_spent):
            problems.append("Invalid time format (HH:MM). Example: 01:30 for 1 hour 30 mins.")
        if problems:
            raise ValueError(" ".join(problems))
        return self


def format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single readable message."""
    messages = []
    for err in exc.errors():
        msg = err["msg"].removeprefix("Value error, ")
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {msg}" if loc else msg)
    return " ".join(messages)


class EntryResponse(SQLModel):
    id: int
    user_id: int
    user_name: str
    date: dt.date
    client: str
    task: str
    docket_number: str | None = None
    description: str
    time_spent: str
    created_at: datetime
    updated_at: datetime | None = None


class OperationResult(BaseModel):
    success: bool
    message: str | None = None
    entry: EntryResponse | None = None
    error: ErrorKind | None = None


class EntryListResponse(BaseModel):
    success: bool
    message: str | None = None
    error: ErrorKind | None = None
    entries: list[EntryResponse]


class CalendarDayResponse(BaseModel):
    date: dt.date
    status: Literal["entry", "missed", "weekend"] | None = None


class CalendarResponse(BaseModel):
    year: int
    month: int
    highlighted_days: list[dt.date]
    missed_days: list[dt.date]
    weeks: list[list[CalendarDayResponse | None]]


class LookupItem(BaseModel):
    id: str
    name: str


class SuggestionRequest(BaseModel):
    current_entry: str
    editing_id: int | None = None


class SuggestionResponse(BaseModel):
    suggested_descriptions: list[str] = Field(default_factory=list)
    suggested_docket_numbers: list[str] = Field(default_factory=list)


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    username: str = Field(min_length=3)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        if not re.fullmatch(r"[^@\s]+@[^@\s]+\.[^@\s]+", v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        return v.strip()


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class SessionUser(BaseModel):
    user_id: int
    username: str
    email: str


class AuthResponse(BaseModel):
    success: bool
    user: SessionUser
    access_token: str
    token_type: str = "bearer"
