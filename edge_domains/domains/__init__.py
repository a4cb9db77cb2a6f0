"""Custom domain lifecycle for edge-domains."""

from .errors import DomainError, DomainErrorKind
from .machine import assert_transition, can_transition
from .models import DomainRecord, DomainStatus, LifecycleInstructions
from .service import DomainLifecycleService
from .store import DomainStore, InMemoryDomainStore, RedisDomainStore
from .dns_lookup import DnsLookup, ResolverDnsLookup, StaticDnsLookup
from .provisioning import (
    CloudflareAdapter,
    DryRunAdapter,
    HostnameStatus,
    ProviderError,
    ProvisioningAdapter,
)

__all__ = [
    "DomainError",
    "DomainErrorKind",
    "assert_transition",
    "can_transition",
    "DomainRecord",
    "DomainStatus",
    "LifecycleInstructions",
    "DomainLifecycleService",
    "DomainStore",
    "InMemoryDomainStore",
    "RedisDomainStore",
    "DnsLookup",
    "ResolverDnsLookup",
    "StaticDnsLookup",
    "CloudflareAdapter",
    "DryRunAdapter",
    "HostnameStatus",
    "ProviderError",
    "ProvisioningAdapter",
]
