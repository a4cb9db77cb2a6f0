"""
Error taxonomy for the domain lifecycle.

All lifecycle failures are raised as ``DomainError`` and distinguished by
``kind`` rather than by subclass, so callers can branch on a single type.
"""

from enum import Enum
from typing import Optional


class DomainErrorKind(str, Enum):
    DOMAIN_NOT_FOUND = "domain_not_found"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    DNS_VERIFICATION_FAILED = "dns_verification_failed"
    MISSING_ADAPTER_REFERENCE = "missing_adapter_reference"
    CONFIGURATION = "configuration"


class DomainError(Exception):
    """A lifecycle error tagged with its kind and structured context."""

    def __init__(
        self,
        kind: DomainErrorKind,
        message: str,
        hostname: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.hostname = hostname
        self.expected = expected
        self.actual = actual
        self.from_status = from_status
        self.to_status = to_status

    def __repr__(self) -> str:
        return f"DomainError(kind={self.kind.value!r}, message={self.message!r})"

    @classmethod
    def not_found(cls, hostname: str) -> "DomainError":
        return cls(
            DomainErrorKind.DOMAIN_NOT_FOUND,
            f"Domain not found: {hostname}",
            hostname=hostname,
        )

    @classmethod
    def invalid_transition(cls, from_status, to_status) -> "DomainError":
        from_value = getattr(from_status, "value", from_status)
        to_value = getattr(to_status, "value", to_status)
        return cls(
            DomainErrorKind.INVALID_STATE_TRANSITION,
            f"Invalid state transition from {from_value} to {to_value}",
            from_status=from_value,
            to_status=to_value,
        )

    @classmethod
    def dns_verification_failed(
        cls, hostname: str, expected: str, actual: str
    ) -> "DomainError":
        return cls(
            DomainErrorKind.DNS_VERIFICATION_FAILED,
            f'DNS verification failed for {hostname}. '
            f'Expected "{expected}", but found "{actual}"',
            hostname=hostname,
            expected=expected,
            actual=actual,
        )

    @classmethod
    def missing_adapter_reference(cls, hostname: str) -> "DomainError":
        return cls(
            DomainErrorKind.MISSING_ADAPTER_REFERENCE,
            f"No adapter reference found for domain {hostname}",
            hostname=hostname,
        )

    @classmethod
    def configuration(cls, message: str) -> "DomainError":
        return cls(
            DomainErrorKind.CONFIGURATION,
            f"Configuration error: {message}",
        )
