"""
Custom domain data model for edge-domains.
"""

import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

TOKEN_PREFIX = "vc-token-"


class DomainStatus(str, Enum):
    """Lifecycle status of a custom hostname."""

    CREATED = "created"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    PENDING_DNS = "pending_dns"
    PROVISIONING_SSL = "provisioning_ssl"
    ACTIVE = "active"
    FAILED = "failed"


NEXT_STEP_MESSAGES = {
    DomainStatus.CREATED: "Initializing domain...",
    DomainStatus.PENDING_VERIFICATION: "Add the TXT record to your DNS provider.",
    DomainStatus.VERIFIED: "DNS verified. You can now get DNS instructions for provisioning.",
    DomainStatus.PENDING_DNS: "Point your CNAME record to our edge.",
    DomainStatus.PROVISIONING_SSL: "SSL is being provisioned. This may take a few minutes.",
    DomainStatus.ACTIVE: "Domain is active and ready.",
    DomainStatus.FAILED: "Process failed. Check logs and retry.",
}
UNKNOWN_STEP_MESSAGE = "Unknown state."


def normalize_hostname(hostname: str) -> str:
    """Trim, lower-case and drop a single trailing slash."""
    hostname = hostname.strip().lower()
    if hostname.endswith("/"):
        hostname = hostname[:-1]
    return hostname


def generate_verification_token() -> str:
    """Random TXT verification value, 16 bytes of entropy."""
    return f"{TOKEN_PREFIX}{secrets.token_hex(16)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainRecord:
    """Persisted state of one custom hostname."""

    hostname: str
    status: DomainStatus = DomainStatus.CREATED
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    verification_token: str = field(default_factory=generate_verification_token)
    adapter_reference_id: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "hostname": self.hostname,
            "status": self.status.value,
            "verification_token": self.verification_token,
            "adapter_reference_id": self.adapter_reference_id,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DomainRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            hostname=data["hostname"],
            status=DomainStatus(data["status"]),
            verification_token=data["verification_token"],
            adapter_reference_id=data.get("adapter_reference_id"),
            error=data.get("error"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass(frozen=True)
class DnsInstruction:
    """A single DNS record the customer has to publish."""

    type: str
    name: str
    value: str
    description: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "value": self.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class LifecycleInstructions:
    """Read projection returned by every lifecycle operation. Never stored."""

    hostname: str
    status: DomainStatus
    next_step: str
    verification: Optional[DnsInstruction] = None
    provisioning: List[DnsInstruction] = field(default_factory=list)

    def to_dict(self) -> dict:
        resp = {
            "hostname": self.hostname,
            "status": self.status.value,
            "next_step": self.next_step,
        }
        if self.verification is not None:
            resp["verification"] = self.verification.to_dict()
        if self.provisioning:
            resp["provisioning"] = [p.to_dict() for p in self.provisioning]
        return resp
