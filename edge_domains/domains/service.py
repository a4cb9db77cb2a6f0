"""
Domain lifecycle service.

Drives a custom hostname from creation to an active certificate:

    created -> pending_verification -> verified -> pending_dns
            -> provisioning_ssl -> active

Every operation re-reads the record from the store, validates the requested
transition against the state machine and writes a new record back. The
service keeps no state between calls and never retries or polls on its own.

Usage:
    service = DomainLifecycleService(store, dns, adapter, "edge.example.com")

    instructions = await service.create_domain("shop.customer.com")
    # customer publishes instructions.verification
    await service.check_verification("shop.customer.com")
    await service.get_dns_instructions("shop.customer.com")
    # customer publishes the CNAME
    await service.provision_domain("shop.customer.com")
    await service.sync_status("shop.customer.com")
"""

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from .dns_lookup import DnsLookup, normalize_target
from .errors import DomainError
from .machine import assert_transition
from .models import (
    NEXT_STEP_MESSAGES,
    UNKNOWN_STEP_MESSAGE,
    DnsInstruction,
    DomainRecord,
    DomainStatus,
    LifecycleInstructions,
    normalize_hostname,
)
from .provisioning import ACTIVE, FAILED, ProvisioningAdapter
from .store import DomainStore

logger = logging.getLogger("edge_domains.domains.service")

DEFAULT_VERIFICATION_KEY = "_edge-verify"


def _status_field(response: Any, name: str, default=None):
    """Read a field from an adapter status response (object or mapping)."""
    if isinstance(response, dict):
        return response.get(name, default)
    return getattr(response, name, default)


class DomainLifecycleService:
    """Orchestrates store, DNS lookup and provisioning adapter."""

    def __init__(
        self,
        store: DomainStore,
        dns: DnsLookup,
        adapter: ProvisioningAdapter,
        cname_target: str,
        verification_key: str = DEFAULT_VERIFICATION_KEY,
    ):
        if store is None:
            raise DomainError.configuration("a domain store is required")
        if dns is None:
            raise DomainError.configuration("a DNS lookup is required")
        if adapter is None:
            raise DomainError.configuration("a provisioning adapter is required")
        if not cname_target:
            raise DomainError.configuration("a CNAME target is required")
        if not verification_key:
            raise DomainError.configuration("a verification key is required")

        self.store = store
        self.dns = dns
        self.adapter = adapter
        self.cname_target = normalize_target(cname_target)
        self.verification_key = verification_key

    # ── Lifecycle operations ─────────────────────────────────────────

    async def create_domain(self, hostname: str) -> LifecycleInstructions:
        """Register a hostname, or return the existing registration."""
        existing = await self.store.lookup(normalize_hostname(hostname))
        if existing:
            return self.render(existing)

        now = datetime.now(timezone.utc)
        record = DomainRecord(
            hostname=normalize_hostname(hostname),
            created_at=now,
            updated_at=now,
        )
        assert_transition(record.status, DomainStatus.PENDING_VERIFICATION)
        record = dataclasses.replace(
            record, status=DomainStatus.PENDING_VERIFICATION
        )

        stored = await self.store.create(record)
        logger.info(f"Registered domain {stored.hostname} ({stored.id})")
        return self.render(stored)

    async def check_verification(self, hostname: str) -> LifecycleInstructions:
        """Check the ownership TXT record and mark the domain verified."""
        record = await self._get_or_raise(hostname)
        if record.status == DomainStatus.VERIFIED:
            return self.render(record)

        assert_transition(record.status, DomainStatus.VERIFIED)

        txt_name = self.verification_name(record.hostname)
        txt_records = await self.dns.resolve_txt(txt_name)
        if record.verification_token in txt_records:
            logger.info(f"TXT record verified at {txt_name}")
            return await self._transition(record, DomainStatus.VERIFIED)

        logger.warning(
            f"Verification token not found at {txt_name} "
            f"({len(txt_records)} TXT records)"
        )
        raise DomainError.dns_verification_failed(
            record.hostname,
            record.verification_token,
            ", ".join(txt_records) or "none found",
        )

    async def get_dns_instructions(self, hostname: str) -> LifecycleInstructions:
        """Advance to pending_dns and hand out the CNAME to publish."""
        record = await self._get_or_raise(hostname)
        if record.status == DomainStatus.PENDING_DNS:
            return self.render(record)

        return await self._transition(record, DomainStatus.PENDING_DNS)

    async def provision_domain(self, hostname: str) -> LifecycleInstructions:
        """
        Create the custom hostname at the provider.

        DNS must already point at the edge: a CNAME to the configured target,
        or at least one A record. A provider failure marks the domain failed
        and the provider's exception is re-raised.
        """
        record = await self._get_or_raise(hostname)
        if record.status == DomainStatus.PROVISIONING_SSL:
            return self.render(record)

        assert_transition(record.status, DomainStatus.PROVISIONING_SSL)

        cnames = await self.dns.resolve_cname(record.hostname)
        a_records = await self.dns.resolve_a(record.hostname)
        if self.cname_target not in cnames and not a_records:
            logger.warning(
                f"DNS for {record.hostname} does not point to {self.cname_target}"
            )
            raise DomainError.dns_verification_failed(
                record.hostname,
                self.cname_target,
                ", ".join(cnames + a_records) or "none",
            )

        try:
            reference_id = await self.adapter.create_custom_hostname(record.hostname)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.error(f"Provisioning failed for {record.hostname}: {reason}")
            await self._transition(record, DomainStatus.FAILED, error=reason)
            raise

        return await self._transition(
            record,
            DomainStatus.PROVISIONING_SSL,
            adapter_reference_id=reference_id,
        )

    async def sync_status(self, hostname: str) -> LifecycleInstructions:
        """
        Poll the provider once and mirror its verdict.

        Provider exceptions propagate; polling callers must see transient
        failures rather than a stale status.
        """
        record = await self._get_or_raise(hostname)
        if record.status == DomainStatus.ACTIVE:
            return self.render(record)

        if not record.adapter_reference_id:
            raise DomainError.missing_adapter_reference(record.hostname)

        response = await self.adapter.get_custom_hostname_status(
            record.adapter_reference_id
        )
        status = _status_field(response, "status")

        if status == ACTIVE:
            return await self._transition(record, DomainStatus.ACTIVE)
        if status == FAILED:
            errors: List[str] = _status_field(response, "verification_errors") or []
            return await self._transition(
                record, DomainStatus.FAILED, error=", ".join(errors)
            )

        logger.debug(f"{record.hostname} still {status} at provider")
        return self.render(record)

    async def get_status(self, hostname: str) -> LifecycleInstructions:
        """Current instructions, no side effects."""
        record = await self._get_or_raise(hostname)
        return self.render(record)

    # ── Rendering ────────────────────────────────────────────────────

    def verification_name(self, hostname: str) -> str:
        return f"{self.verification_key}.{hostname}"

    def render(self, record: DomainRecord) -> LifecycleInstructions:
        """Build the caller-facing instructions for a record."""
        verification: Optional[DnsInstruction] = None
        provisioning: List[DnsInstruction] = []

        if record.status == DomainStatus.PENDING_VERIFICATION:
            verification = DnsInstruction(
                type="TXT",
                name=self.verification_name(record.hostname),
                value=record.verification_token,
                description="Add this TXT record to verify ownership of the domain.",
            )

        if record.status in (DomainStatus.PENDING_DNS, DomainStatus.PROVISIONING_SSL):
            provisioning.append(
                DnsInstruction(
                    type="CNAME",
                    name=record.hostname,
                    value=self.cname_target,
                    description="Point your domain to our edge network.",
                )
            )

        return LifecycleInstructions(
            hostname=record.hostname,
            status=record.status,
            next_step=NEXT_STEP_MESSAGES.get(record.status, UNKNOWN_STEP_MESSAGE),
            verification=verification,
            provisioning=provisioning,
        )

    # ── Helpers ──────────────────────────────────────────────────────

    async def _get_or_raise(self, hostname: str) -> DomainRecord:
        record = await self.store.lookup(normalize_hostname(hostname))
        if record is None:
            raise DomainError.not_found(hostname)
        return record

    async def _transition(
        self,
        record: DomainRecord,
        next_status: DomainStatus,
        error: Optional[str] = None,
        adapter_reference_id: Optional[str] = None,
    ) -> LifecycleInstructions:
        """The only path that changes a record's status."""
        assert_transition(record.status, next_status)

        changes = {
            "status": next_status,
            "updated_at": datetime.now(timezone.utc),
        }
        if error:
            changes["error"] = error
        if adapter_reference_id is not None:
            changes["adapter_reference_id"] = adapter_reference_id

        updated = await self.store.update(dataclasses.replace(record, **changes))
        logger.info(
            f"Domain {updated.hostname}: {record.status.value} -> "
            f"{updated.status.value}"
        )
        return self.render(updated)
