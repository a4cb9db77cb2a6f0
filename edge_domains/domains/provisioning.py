"""
Custom hostname provisioning at an external edge provider.

The provider owns certificate issuance. The lifecycle service only needs to
create a hostname, poll it and (for caller-driven cleanup) delete it.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, TypeVar, runtime_checkable

import aiohttp

from .errors import DomainError

logger = logging.getLogger("edge_domains.domains.provisioning")

StatusT = TypeVar("StatusT", covariant=True)

PENDING = "pending"
ACTIVE = "active"
FAILED = "failed"
MOVED = "moved"


@dataclass
class HostnameStatus:
    """Provider-reported state of a custom hostname."""

    status: str
    verification_errors: List[str] = field(default_factory=list)
    ssl_status: Optional[str] = None
    id: Optional[str] = None


@runtime_checkable
class ProvisioningAdapter(Protocol[StatusT]):
    async def create_custom_hostname(self, hostname: str) -> str:
        ...

    async def get_custom_hostname_status(self, reference_id: str) -> StatusT:
        ...

    async def delete_custom_hostname(self, reference_id: str) -> None:
        ...


class ProviderError(Exception):
    """Raised when the provider API rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CloudflareAdapter:
    """Cloudflare for SaaS custom hostnames over the v4 REST API."""

    BASE_URL = "https://api.cloudflare.com/client/v4"

    # Cloudflare hostname status -> provider-neutral status
    STATUS_MAP = {
        "pending": PENDING,
        "pending_validation": PENDING,
        "pending_deployment": PENDING,
        "active": ACTIVE,
        "blocked": FAILED,
        "deleted": FAILED,
        "moved": MOVED,
    }

    def __init__(
        self,
        account_id: str,
        api_token: str,
        zone_id: str,
        base_url: Optional[str] = None,
        timeout: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if not account_id:
            raise DomainError.configuration("Cloudflare account ID is required")
        if not api_token:
            raise DomainError.configuration("Cloudflare API token is required")
        if not zone_id:
            raise DomainError.configuration("Cloudflare zone ID is required")
        self.account_id = account_id
        self.api_token = api_token
        self.zone_id = zone_id
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Bearer {self.api_token}",
                    "Content-Type": "application/json",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    def _hostnames_url(self, reference_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/zones/{self.zone_id}/custom_hostnames"
        if reference_id:
            url = f"{url}/{reference_id}"
        return url

    async def _request(self, method: str, url: str, **kwargs):
        session = self._get_session()
        try:
            async with session.request(method, url, **kwargs) as resp:
                try:
                    data = await resp.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    # Gateways answer with HTML error pages
                    logger.error(f"Cloudflare API returned a non-JSON body ({resp.status})")
                    raise ProviderError(
                        f"Cloudflare API error: HTTP {resp.status}",
                        status_code=resp.status,
                    )
                if resp.status >= 400 or not data or not data.get("success"):
                    errors = ", ".join(
                        e.get("message", "") for e in (data or {}).get("errors") or []
                    ) or "Unknown error"
                    logger.error(f"Cloudflare API error ({resp.status}): {errors}")
                    raise ProviderError(
                        f"Cloudflare API error: {errors}", status_code=resp.status
                    )
                return data.get("result")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            reason = str(e) or type(e).__name__
            logger.error(f"Cloudflare request {method} {url} failed: {reason}")
            raise ProviderError(f"Cloudflare request failed: {reason}") from e

    @classmethod
    def map_status(cls, cf_status: Optional[str]) -> str:
        return cls.STATUS_MAP.get(cf_status or "", PENDING)

    @classmethod
    def map_response(cls, result: dict) -> HostnameStatus:
        return HostnameStatus(
            id=result.get("id"),
            status=cls.map_status(result.get("status")),
            ssl_status=(result.get("ssl") or {}).get("status", "unknown"),
            verification_errors=list(result.get("verification_errors") or []),
        )

    async def create_custom_hostname(self, hostname: str) -> str:
        """Create a custom hostname and return its Cloudflare id."""
        payload = {
            "hostname": hostname,
            "ssl": {
                "method": "http",
                "type": "dv",
                "settings": {
                    "http2": "on",
                    "min_tls_version": "1.2",
                    "tls_1_3": "on",
                },
            },
        }
        logger.info(f"Creating Cloudflare custom hostname for {hostname}")
        result = await self._request("POST", self._hostnames_url(), json=payload)
        return result["id"]

    async def get_custom_hostname_status(self, reference_id: str) -> HostnameStatus:
        result = await self._request("GET", self._hostnames_url(reference_id))
        return self.map_response(result)

    async def delete_custom_hostname(self, reference_id: str) -> None:
        logger.info(f"Deleting Cloudflare custom hostname {reference_id}")
        await self._request("DELETE", self._hostnames_url(reference_id))

    async def list_custom_hostnames(
        self, page: int = 1, per_page: int = 50
    ) -> List[HostnameStatus]:
        result = await self._request(
            "GET",
            self._hostnames_url(),
            params={"page": page, "per_page": per_page},
        )
        return [self.map_response(r) for r in result or []]

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()


class DryRunAdapter:
    """Adapter that only logs what it would do."""

    def __init__(self, status: str = ACTIVE):
        self.status = status

    async def create_custom_hostname(self, hostname: str) -> str:
        reference_id = f"dry-run-{secrets.token_hex(8)}"
        logger.info(
            f"[DRY-RUN] create custom hostname {hostname} -> {reference_id}"
        )
        return reference_id

    async def get_custom_hostname_status(self, reference_id: str) -> HostnameStatus:
        logger.info(f"[DRY-RUN] status of {reference_id}: {self.status}")
        return HostnameStatus(status=self.status, id=reference_id)

    async def delete_custom_hostname(self, reference_id: str) -> None:
        logger.info(f"[DRY-RUN] delete custom hostname {reference_id}")
