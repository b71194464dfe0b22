"""Candidate selection for poll resolution."""
from __future__ import annotations

from typing import Optional, Sequence

from src.correlation.domain.value_objects import CandidateResource


def pick_most_recent(candidates: Sequence[CandidateResource]) -> Optional[CandidateResource]:
    """Most recently active candidate; the first one wins among equal timestamps."""
    if not candidates:
        return None
    return max(candidates, key=lambda c: c.recency_ms)


def pick_by_subject(candidates: Sequence[CandidateResource], subject_hint: Optional[str]) -> Optional[CandidateResource]:
    """
    Narrow by case-insensitive subject substring, then take the most recent.

    The hint is best-effort: when nothing matches, the unfiltered set is used.
    """
    if not subject_hint or not subject_hint.strip():
        return pick_most_recent(candidates)
    needle = subject_hint.lower()
    matches = [c for c in candidates if needle in c.subject.lower()]
    return pick_most_recent(matches or candidates)
