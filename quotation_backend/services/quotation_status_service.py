# quotation_backend/services/quotation_status_service.py
"""
Quotation lifecycle rules.

    draft -> sent -> approved -> converted
                  -> rejected
    sent | approved -> expired   (once valid_until has passed)

Expiration is derived at read time: a sent/approved quotation past its
``valid_until`` counts as expired whatever its stored status says. The
functions here only answer yes/no; persisting a transition is the job of
``quotation_service``.
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from quotation_backend.core.enums import QuotationAction, QuotationStatus, UserRole
from quotation_backend.utils.check_roles import has_role

EXPIRABLE_STATUSES = {QuotationStatus.SENT, QuotationStatus.APPROVED}

TRANSITIONS = {
    QuotationStatus.DRAFT: {QuotationStatus.SENT},
    QuotationStatus.SENT: {QuotationStatus.APPROVED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED},
    QuotationStatus.APPROVED: {QuotationStatus.CONVERTED, QuotationStatus.EXPIRED},
}


# --------------------------
# Helpers
# --------------------------
def to_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return to_utc(now) if now is not None else datetime.now(timezone.utc)


def _status(quotation: Any) -> Optional[QuotationStatus]:
    try:
        return QuotationStatus(getattr(quotation, "status", None))
    except ValueError:
        return None


def _within_validity(quotation: Any, now: Optional[datetime]) -> bool:
    valid_until = getattr(quotation, "valid_until", None)
    if valid_until is None:
        return False
    if isinstance(valid_until, str):
        try:
            valid_until = datetime.fromisoformat(valid_until)
        except ValueError:
            return False
    return _now(now) <= to_utc(valid_until)


def _total(quotation: Any) -> Decimal:
    try:
        return Decimal(str(getattr(quotation, "total_amount", None) or 0))
    except InvalidOperation:
        return Decimal("0")


# --------------------------
# Predicates
# --------------------------
def is_expired(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) in EXPIRABLE_STATUSES and not _within_validity(quotation, now)


def is_usable(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) in EXPIRABLE_STATUSES and _within_validity(quotation, now)


def effective_status(quotation: Any, now: Optional[datetime] = None) -> Optional[QuotationStatus]:
    if is_expired(quotation, now):
        return QuotationStatus.EXPIRED
    return _status(quotation)


def can_edit(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) == QuotationStatus.DRAFT


def can_delete(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) == QuotationStatus.DRAFT


def can_send(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) == QuotationStatus.DRAFT and _total(quotation) > 0


def can_approve(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) == QuotationStatus.SENT and _within_validity(quotation, now)


def can_reject(quotation: Any, now: Optional[datetime] = None) -> bool:
    return _status(quotation) == QuotationStatus.SENT and _within_validity(quotation, now)


def can_convert(quotation: Any, now: Optional[datetime] = None) -> bool:
    return (
        _status(quotation) == QuotationStatus.APPROVED
        and _within_validity(quotation, now)
        and not getattr(quotation, "converted_order_id", None)
    )


_GUARDS = {
    QuotationStatus.SENT: can_send,
    QuotationStatus.APPROVED: can_approve,
    QuotationStatus.REJECTED: can_reject,
    QuotationStatus.CONVERTED: can_convert,
    QuotationStatus.EXPIRED: is_expired,
}


def can_transition(quotation: Any, target: Any, now: Optional[datetime] = None) -> bool:
    try:
        target = QuotationStatus(target)
    except ValueError:
        return False

    current = _status(quotation)
    if target not in TRANSITIONS.get(current, set()):
        return False
    return _GUARDS[target](quotation, now)


_ACTION_CHECKS = [
    (QuotationAction.EDIT, can_edit),
    (QuotationAction.SEND, can_send),
    (QuotationAction.APPROVE, can_approve),
    (QuotationAction.REJECT, can_reject),
    (QuotationAction.CONVERT, can_convert),
    (QuotationAction.DELETE, can_delete),
]


ADMIN_ONLY_ACTIONS = {
    QuotationAction.APPROVE,
    QuotationAction.REJECT,
    QuotationAction.CONVERT,
    QuotationAction.DELETE,
}


def allowed_actions(quotation: Any, now: Optional[datetime] = None, user: Any = None) -> List[QuotationAction]:
    """
    Actions the caller may offer for this quotation right now. With ``user``
    the list is also narrowed to what that user's role is permitted to do.
    """
    now = _now(now)
    actions = [action for action, check in _ACTION_CHECKS if check(quotation, now)]
    if user is not None and not has_role(user, UserRole.ADMIN):
        actions = [action for action in actions if action not in ADMIN_ONLY_ACTIONS]
    actions.append(QuotationAction.DUPLICATE)
    return actions
