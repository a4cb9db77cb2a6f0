"""
Lifecycle state machine for custom domains.

Single-step, forward-only transitions. No retries, no implicit skips and no
self loops. ``active`` and ``failed`` are terminal.
"""

from types import MappingProxyType

from .errors import DomainError
from .models import DomainStatus

# Do not edit without a migration plan for persisted records.
TRANSITIONS = MappingProxyType({
    DomainStatus.CREATED: frozenset({DomainStatus.PENDING_VERIFICATION}),
    DomainStatus.PENDING_VERIFICATION: frozenset(
        {DomainStatus.VERIFIED, DomainStatus.FAILED}
    ),
    DomainStatus.VERIFIED: frozenset({DomainStatus.PENDING_DNS}),
    DomainStatus.PENDING_DNS: frozenset(
        {DomainStatus.PROVISIONING_SSL, DomainStatus.FAILED}
    ),
    DomainStatus.PROVISIONING_SSL: frozenset(
        {DomainStatus.ACTIVE, DomainStatus.FAILED}
    ),
    DomainStatus.ACTIVE: frozenset(),
    DomainStatus.FAILED: frozenset(),
})


def can_transition(from_status, to_status) -> bool:
    """Return True if ``from_status -> to_status`` is a legal edge."""
    try:
        return to_status in TRANSITIONS.get(from_status, frozenset())
    except TypeError:
        # unhashable input is never a status
        return False


def assert_transition(from_status, to_status) -> None:
    """Raise an invalid-transition DomainError unless the edge is legal."""
    if not can_transition(from_status, to_status):
        raise DomainError.invalid_transition(from_status, to_status)
