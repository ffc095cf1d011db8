import datetime as dt
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)  # Stored lower-cased
    username: str
    hashed_password: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TimelineEntry(SQLModel, table=True):
    __tablename__ = "timeline_entries"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    user_name: str  # Denormalized from the session at creation
    date: dt.date = Field(index=True)
    client: str  # Lookup id, see lookups.CLIENTS
    task: str  # Lookup id, see lookups.TASKS
    docket_number: str | None = Field(default=None)
    description: str
    time_spent: str  # HH:MM
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)
