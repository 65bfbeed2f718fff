"""Enum definitions for application constants."""

from enum import Enum


class CaseStatus(str, Enum):
    """
    Case status enum.

        new → in_review → answered → resolved, closed reachable from anywhere.

    Transition rules live in core/case_lifecycle.py.
    """
    NEW = "new"
    IN_REVIEW = "in_review"  # An expert started triage
    ANSWERED = "answered"  # An expert reply was delivered
    RESOLVED = "resolved"
    CLOSED = "closed"  # Absorbing

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid status."""
        return value in cls._value2member_map_


class CaseCategory(str, Enum):
    """What happened to the bird."""
    WING_INJURY = "wing_injury"
    LEG_INJURY = "leg_injury"
    ENTANGLED = "entangled"
    ABNORMAL_BEHAVIOR = "abnormal_behavior"
    FLEDGLING = "fledgling"
    OTHER = "other"


class SenderType(str, Enum):
    """Author of a message."""
    CITIZEN = "citizen"
    EXPERT = "expert"


class OutboundEventType(str, Enum):
    """Events forwarded to the automation pipeline."""
    CASE_CREATED = "case_created"
    MESSAGE_SENT = "message_sent"


DEFAULT_CASE_STATUS = CaseStatus.NEW
UNKNOWN_EXPERT_ID = "unknown"
