"""
DNS lookups used by the domain lifecycle.

The lifecycle service never resolves names itself; it goes through a
``DnsLookup``. Lookups return an empty list when the name has no record of
the requested type and raise on anything else (timeouts, broken
nameservers), so a transport problem is never mistaken for a missing record.
"""

import logging
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

import dns.asyncresolver
import dns.resolver

logger = logging.getLogger("edge_domains.domains.dns_lookup")

# Raised by dnspython when the name or the record type does not exist.
_NOT_FOUND = (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer)


def normalize_target(hostname: str) -> str:
    """Lower-case a DNS name and drop the trailing root dot."""
    return hostname.strip().lower().rstrip(".")


@runtime_checkable
class DnsLookup(Protocol):
    async def resolve_txt(self, name: str) -> List[str]:
        ...

    async def resolve_cname(self, name: str) -> List[str]:
        ...

    async def resolve_a(self, name: str) -> List[str]:
        ...


class ResolverDnsLookup:
    """DnsLookup backed by dnspython's async resolver."""

    def __init__(
        self,
        nameservers: Optional[Iterable[str]] = None,
        timeout: float = 10.0,
    ):
        self.nameservers = list(nameservers or [])
        self.timeout = timeout

    def _get_resolver(self) -> "dns.asyncresolver.Resolver":
        if self.nameservers:
            # Explicit nameservers bypass the system resolver configuration
            resolver = dns.asyncresolver.Resolver(configure=False)
            resolver.nameservers = self.nameservers
        else:
            resolver = dns.asyncresolver.Resolver()
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout
        return resolver

    async def _resolve(self, name: str, rdtype: str):
        name = normalize_target(name)
        try:
            return await self._get_resolver().resolve(name, rdtype)
        except _NOT_FOUND as e:
            logger.debug(f"No {rdtype} records for {name}: {e}")
            return []

    async def resolve_txt(self, name: str) -> List[str]:
        answers = await self._resolve(name, "TXT")
        records = []
        for rdata in answers:
            # TXT records may be split into multiple strings
            records.append(
                "".join(
                    s.decode() if isinstance(s, bytes) else s
                    for s in rdata.strings
                ).strip()
            )
        return records

    async def resolve_cname(self, name: str) -> List[str]:
        answers = await self._resolve(name, "CNAME")
        return [normalize_target(str(rdata.target)) for rdata in answers]

    async def resolve_a(self, name: str) -> List[str]:
        answers = await self._resolve(name, "A")
        return [str(rdata) for rdata in answers]


class StaticDnsLookup:
    """
    DnsLookup answering from fixed tables.

    Used for dry runs and tests. Names are matched case-insensitively.
    """

    def __init__(
        self,
        txt: Optional[Dict[str, List[str]]] = None,
        cname: Optional[Dict[str, List[str]]] = None,
        a: Optional[Dict[str, List[str]]] = None,
    ):
        self.txt = {normalize_target(k): list(v) for k, v in (txt or {}).items()}
        self.cname = {
            normalize_target(k): [normalize_target(t) for t in v]
            for k, v in (cname or {}).items()
        }
        self.a = {normalize_target(k): list(v) for k, v in (a or {}).items()}

    def set_txt(self, name: str, values: List[str]) -> None:
        self.txt[normalize_target(name)] = list(values)

    def set_cname(self, name: str, targets: List[str]) -> None:
        self.cname[normalize_target(name)] = [normalize_target(t) for t in targets]

    async def resolve_txt(self, name: str) -> List[str]:
        return list(self.txt.get(normalize_target(name), []))

    async def resolve_cname(self, name: str) -> List[str]:
        return list(self.cname.get(normalize_target(name), []))

    async def resolve_a(self, name: str) -> List[str]:
        return list(self.a.get(normalize_target(name), []))
