"""
Case status lifecycle.

    new → in_review → answered → resolved
    any → closed (absorbing)

Forward jumps are allowed (the automation may skip triage), regressions are
rejected. Once a case is closed every further update is a no-op.
"""

from fixmypidge.core.exceptions import ValidationError
from fixmypidge.db.enums import CaseStatus

STATUS_ORDER: dict[CaseStatus, int] = {
    CaseStatus.NEW: 0,
    CaseStatus.IN_REVIEW: 1,
    CaseStatus.ANSWERED: 2,
    CaseStatus.RESOLVED: 3,
}

INITIAL_STATUS = CaseStatus.NEW


def parse_status(value: str | CaseStatus) -> CaseStatus:
    """Coerce a raw status string, raising ValidationError for unknown values."""
    if isinstance(value, CaseStatus):
        return value
    if not CaseStatus.has_value(value):
        raise ValidationError(f"Unknown status: {value}")
    return CaseStatus(value)


def resolve_transition(current: str | CaseStatus, target: str | CaseStatus) -> CaseStatus:
    """Return the status a case ends up in when `target` is requested."""
    current = parse_status(current)
    target = parse_status(target)

    if current == CaseStatus.CLOSED or target == CaseStatus.CLOSED:
        return CaseStatus.CLOSED
    if target == current:
        return current
    if STATUS_ORDER[target] < STATUS_ORDER[current]:
        raise ValidationError(
            f"Invalid status transition: {current.value} -> {target.value}"
        )
    return target
