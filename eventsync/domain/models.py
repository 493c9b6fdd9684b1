"""Domain models for the event sync layer.

All models use Pydantic v2 for validation and serialization.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InboundEvent(BaseModel):
    """Push event delivered over the notification channel.

    Only the fields used for routing are kept; anything else in the payload
    is ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    title: str = Field(..., description="Event title, e.g. 'Activity join'")
    message: str = Field(default="", description="Free-text human readable message")
    project_id: str | None = Field(
        default=None, alias="projectId", description="Related project id, if sent"
    )
    recipient_email: str | None = Field(
        default=None,
        alias="recipientEmail",
        description="Structured recipient, sent only for some titles",
    )


class ViewerContext(BaseModel):
    """Identity of the viewer of an active session."""

    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., description="Email address or equivalent unique string")
    user_id: str | None = Field(default=None, description="Backend user id, if known")


class SeenMarker(BaseModel):
    """Most recently observed event id and when it was first observed."""

    model_config = ConfigDict(frozen=True)

    last_seen_event_id: str
    observed_at: datetime

    def to_storage(self) -> dict[str, Any]:
        """Serialize to the storage shape `{id, timestamp(epoch millis)}`."""
        return {
            "id": self.last_seen_event_id,
            "timestamp": int(round(self.observed_at.timestamp() * 1000)),
        }


class ReminderCheckpoint(str, Enum):
    """Named reminder checkpoints, in schedule order."""

    THIRTY_BEFORE_START = "thirty_before_start"
    TEN_BEFORE_START = "ten_before_start"
    AT_START = "at_start"
    TEN_BEFORE_END = "ten_before_end"
    AT_END = "at_end"

    @property
    def label(self) -> str:
        return _CHECKPOINT_LABELS[self]

    @property
    def notification_title(self) -> str:
        """Title the server uses for the reminder notification."""
        return _CHECKPOINT_TITLES[self]


_CHECKPOINT_LABELS: dict[ReminderCheckpoint, str] = {
    ReminderCheckpoint.THIRTY_BEFORE_START: "30 minutes before",
    ReminderCheckpoint.TEN_BEFORE_START: "10 minutes before",
    ReminderCheckpoint.AT_START: "At start",
    ReminderCheckpoint.TEN_BEFORE_END: "10 minutes before end",
    ReminderCheckpoint.AT_END: "At end",
}

_CHECKPOINT_TITLES: dict[ReminderCheckpoint, str] = {
    ReminderCheckpoint.THIRTY_BEFORE_START: "Activity Starting Soon",
    ReminderCheckpoint.TEN_BEFORE_START: "Activity Starting Soon",
    ReminderCheckpoint.AT_START: "Activity Started",
    ReminderCheckpoint.TEN_BEFORE_END: "Activity Ending Soon",
    ReminderCheckpoint.AT_END: "Activity Ended",
}


class ReminderSchedule(BaseModel):
    """Absolute reminder checkpoints derived from an activity's start and end."""

    model_config = ConfigDict(frozen=True)

    thirty_before_start: datetime
    ten_before_start: datetime
    at_start: datetime
    ten_before_end: datetime
    at_end: datetime

    def checkpoints(self) -> list[tuple[ReminderCheckpoint, datetime]]:
        """Return checkpoints in declared order (not sorted by time)."""
        return [(checkpoint, self[checkpoint]) for checkpoint in ReminderCheckpoint]

    def upcoming(self, now: datetime) -> list[tuple[ReminderCheckpoint, datetime]]:
        """Return checkpoints strictly after `now`, past ones dropped."""
        return [(name, at) for name, at in self.checkpoints() if at > now]

    def __getitem__(self, checkpoint: ReminderCheckpoint) -> datetime:
        return getattr(self, checkpoint.value)  # type: ignore[no-any-return]


class SurfaceConfig(BaseModel):
    """Routing rules for one rendered surface (participant, leader, admin)."""

    name: str = Field(..., description="Surface name")
    interested_titles: set[str] = Field(
        default_factory=set,
        description="Titles that trigger a refresh when the message names the viewer",
    )
    broadcast_titles: set[str] = Field(
        default_factory=set,
        description="Titles that refresh the project list for every viewer",
    )
    recipient_field_titles: set[str] = Field(
        default_factory=set,
        description="Titles addressed by the structured recipientEmail field",
    )
    suppressed_titles: set[str] = Field(
        default_factory=set,
        description="Titles hidden from this surface's notification list",
    )

    @field_validator(
        "interested_titles",
        "broadcast_titles",
        "recipient_field_titles",
        "suppressed_titles",
        mode="before",
    )
    @classmethod
    def _coerce_titles(cls, value: Any) -> Any:
        if value is None:
            return set()
        return value


class NotificationRecord(BaseModel):
    """Notification as returned by the REST provider."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    notification_id: str = Field(..., alias="_id")
    title: str
    message: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")
    read: bool = False
    project_id: str | None = Field(default=None, alias="project")
    recipient_email: str | None = Field(default=None, alias="recipientEmail")


class MetricSnapshot(BaseModel):
    """Daily metric series for a dashboard.

    `series` maps a series name (e.g. `projectsDaily`) to one value per date.
    """

    dates: list[str] = Field(default_factory=list)
    series: dict[str, list[float]] = Field(default_factory=dict)
    totals: dict[str, float] = Field(default_factory=dict)

    def get_series(self, name: str) -> list[float]:
        return list(self.series.get(name, []))


class PushDecision(str, Enum):
    """Outcome of handling one push event."""

    DROPPED = "dropped"
    IGNORED = "ignored"
    PROJECTS_REFRESHED = "projects_refreshed"
    REFRESHED = "refreshed"
    REFRESH_FAILED = "refresh_failed"


class SurfaceSnapshot(BaseModel):
    """Freshly fetched state of a surface."""

    projects: list[dict[str, Any]] = Field(default_factory=list)
    notifications: list[NotificationRecord] = Field(default_factory=list)
    metrics: MetricSnapshot | None = None
    new_notification_id: str | None = None
    fetched_at: datetime
