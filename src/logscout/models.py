"""Pydantic models for logscout."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from logscout.errors import RemoteQueryFailed, RemoteQueryTimedOut


class RetrievalStatus(StrEnum):
    """Lifecycle of one retrieval."""

    IDLE = "idle"
    SUBMITTED = "submitted"
    RUNNING = "running"
    LOADED = "loaded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in {RetrievalStatus.LOADED, RetrievalStatus.FAILED, RetrievalStatus.TIMED_OUT}

    @property
    def in_progress(self) -> bool:
        return self in {RetrievalStatus.SUBMITTED, RetrievalStatus.RUNNING}


class RetrievalSnapshot(BaseModel):
    """Immutable value published by a fetcher after every state change."""

    model_config = ConfigDict(frozen=True)

    status: RetrievalStatus = RetrievalStatus.IDLE
    lines: tuple[str, ...] = ()
    reason: str | None = None
    generation: int = 0

    @property
    def label(self) -> str:
        """One-line status string for titles and the status bar."""
        if self.status == RetrievalStatus.FAILED:
            return f"Failed: {self.reason}" if self.reason else "Failed"
        if self.status == RetrievalStatus.TIMED_OUT:
            return f"Timed out: {self.reason}" if self.reason else "Timed out"
        return self.status.value.replace("_", " ").capitalize()

    def raise_for_status(self) -> None:
        """Raise the matching remote error for failed snapshots."""
        if self.status == RetrievalStatus.FAILED:
            raise RemoteQueryFailed(self.reason or "query failed")
        if self.status == RetrievalStatus.TIMED_OUT:
            raise RemoteQueryTimedOut(self.reason or "query timed out")


class QueryStatus(StrEnum):
    """Status reported by the remote service for a submitted query."""

    SCHEDULED = "Scheduled"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> QueryStatus:
        try:
            return cls(value or "Unknown")
        except ValueError:
            return cls.UNKNOWN


class QueryRow(BaseModel):
    """One result row: the ordered (field, value) pairs returned for a log event."""

    fields: list[tuple[str, str]] = []

    def get(self, field: str) -> str | None:
        for name, value in self.fields:
            if name == field:
                return value
        return None


class QueryPage(BaseModel):
    """Response to a single poll of a submitted query."""

    status: QueryStatus
    rows: list[QueryRow] = []


class MatchResult(BaseModel):
    """A candidate that passed the fuzzy matcher."""

    model_config = ConfigDict(frozen=True)

    candidate: str
    score: int = 0
    indices: tuple[int, ...] = ()


class AppConfig(BaseModel):
    """Application configuration persisted to disk."""

    theme: str = "textual-dark"
    lookback: str = "48h"
    query: str = "fields @timestamp, @message | sort @timestamp desc | limit 10000"
    message_key: str | None = None
    poll_interval: float = Field(default=0.25, gt=0)
    poll_backoff: float = Field(default=1.5, ge=1)
    poll_max_interval: float = Field(default=2.0, gt=0)
    query_timeout: float = Field(default=300.0, gt=0)

    def poll_settings(self) -> dict[str, Any]:
        """Keyword arguments for PollingFetcher."""
        return {
            "interval": self.poll_interval,
            "backoff": self.poll_backoff,
            "max_interval": self.poll_max_interval,
            "timeout": self.query_timeout,
        }
