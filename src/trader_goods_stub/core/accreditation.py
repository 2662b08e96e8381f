from trader_goods_stub.core.errors import IllegalAccreditationTransitionError
from trader_goods_stub.models import AccreditationStatus

_ALLOWED: dict[AccreditationStatus, frozenset[AccreditationStatus]] = {
    AccreditationStatus.NOT_REQUESTED: frozenset({AccreditationStatus.PENDING}),
    AccreditationStatus.PENDING: frozenset({AccreditationStatus.APPROVED, AccreditationStatus.REJECTED}),
    AccreditationStatus.APPROVED: frozenset(),
    AccreditationStatus.REJECTED: frozenset(),
}

INITIAL_STATUS = AccreditationStatus.NOT_REQUESTED


def can_transition(current: AccreditationStatus, target: AccreditationStatus) -> bool:
    return target == current or target in _ALLOWED[current]


def transition(current: AccreditationStatus, target: AccreditationStatus) -> AccreditationStatus:
    """Return ``target`` if the move is legal; staying put is always allowed."""
    if not can_transition(current, target):
        raise IllegalAccreditationTransitionError(current, target)
    return target
