"""
Enums for domain models.
Stored as plain strings; the enums give the allowed values and ordering.
"""

import enum


class LiveSessionStatus(str, enum.Enum):
    """Live session lifecycle states, in transition order."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ParticipantRole(str, enum.Enum):
    """The two fixed parties of a live session."""

    TUTOR = "tutor"
    LEARNER = "learner"


class TransitionAction(str, enum.Enum):
    """Audit actions recorded for applied status transitions."""

    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
