# src/correlation/domain/value_objects.py
"""Correlation value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .exceptions import InvalidCorrelationValueError


class Strategy(str, Enum):
    """How the façade discovers a remote resource id."""
    PUSH = "push"
    POLL = "poll"
    HYBRID = "hybrid"  # push first, poll on timeout


@dataclass(frozen=True, slots=True)
class CorrelationKey:
    """Identifies one in-flight resolution (observed: the customer's email)."""

    value: str

    def __post_init__(self) -> None:
        v = (self.value or "").strip()
        object.__setattr__(self, "value", v)
        if not v:
            raise InvalidCorrelationValueError("Correlation key cannot be empty")

    @classmethod
    def of(cls, key: Union["CorrelationKey", str]) -> "CorrelationKey":
        return key if isinstance(key, CorrelationKey) else cls(key)

    def __str__(self) -> str:
        return self.value


def require_resource_id(resource_id: Any) -> str:
    """Resource ids are opaque; the only invariant is non-emptiness."""
    value = "" if resource_id is None else str(resource_id).strip()
    if not value:
        raise InvalidCorrelationValueError("Resource id cannot be empty")
    return value


def to_timestamp(value: Any) -> int:
    """
    Coerce a listing timestamp to epoch milliseconds.

    Numbers pass through, numeric strings are parsed, ISO-8601 strings are
    converted; anything else is 0 so it loses every recency comparison.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            pass
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return 0
        return int(parsed.timestamp() * 1000)
    return 0


@dataclass(frozen=True, slots=True)
class CandidateResource:
    """One row of the third-party listing; ephemeral, never stored."""

    id: str
    subject: str
    recency_ms: int

    @classmethod
    def from_listing(cls, row: Mapping[str, Any]) -> Optional["CandidateResource"]:
        """
        Build from a HubSpot thread row.

        Recency prefers latestMessageTimestamp, then updatedAt, then createdAt.
        Rows without an id are skipped (None).
        """
        raw_id = row.get("id")
        if raw_id in (None, ""):
            return None
        subject = row.get("subject")
        recency = row.get("latestMessageTimestamp") or row.get("updatedAt") or row.get("createdAt")
        return cls(
            id=str(raw_id),
            subject=subject if isinstance(subject, str) else "",
            recency_ms=to_timestamp(recency),
        )


@dataclass(frozen=True, slots=True)
class SearchParams:
    """Inputs of one poll resolution."""

    trigger_time_ms: int
    subject_hint: Optional[str] = None
    lookback_ms: int = 10 * 60 * 1000
    page_size: int = 20

    @property
    def window_start_ms(self) -> int:
        return self.trigger_time_ms - self.lookback_ms


@dataclass(frozen=True, slots=True)
class ResolutionAttempt:
    """One polling iteration; discarded after its query."""

    attempt_number: int
    window_start_ms: int
    subject_hint: Optional[str]
