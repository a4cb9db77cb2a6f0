"""
REST API for the custom domain lifecycle.
"""

import asyncio
import logging
import re

import aiohttp
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from ..domains.errors import DomainError, DomainErrorKind
from ..domains.models import normalize_hostname
from ..domains.provisioning import ProviderError
from ..domains.service import DomainLifecycleService

logger = logging.getLogger("edge_domains.api.domains")

router = APIRouter(prefix="/api/domains", tags=["domains"])

# Valid domain pattern: allows subdomains of any depth
_DOMAIN_RE = re.compile(
    r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+"
    r"[a-zA-Z]{2,}$"
)

_STATUS_CODES = {
    DomainErrorKind.DOMAIN_NOT_FOUND: 404,
    DomainErrorKind.INVALID_STATE_TRANSITION: 409,
    DomainErrorKind.DNS_VERIFICATION_FAILED: 422,
    DomainErrorKind.MISSING_ADAPTER_REFERENCE: 409,
    DomainErrorKind.CONFIGURATION: 500,
}


# ── Request models ───────────────────────────────────────────────────

class DomainCreateRequest(BaseModel):
    hostname: str


# ── Helpers ──────────────────────────────────────────────────────────

def _service(request: Request) -> DomainLifecycleService:
    return request.app.state.domain_service


async def _run(operation, hostname: str) -> dict:
    """Run a lifecycle operation and translate its errors to HTTP."""
    try:
        instructions = await operation(hostname)
    except DomainError as e:
        raise HTTPException(
            status_code=_STATUS_CODES.get(e.kind, 400),
            detail={"kind": e.kind.value, "message": e.message},
        )
    except ProviderError as e:
        logger.error(f"Provider error for {hostname}: {e}")
        raise HTTPException(status_code=502, detail=f"Provider error: {e}")
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        # Adapters other than Cloudflare may surface transport errors directly
        reason = str(e) or type(e).__name__
        logger.error(f"Provider unreachable for {hostname}: {reason}")
        raise HTTPException(status_code=502, detail=f"Provider error: {reason}")
    return instructions.to_dict()


# ── Routes ───────────────────────────────────────────────────────────

@router.post("")
async def create_domain(body: DomainCreateRequest, request: Request):
    """Register a custom domain and return its TXT verification record."""
    hostname = normalize_hostname(body.hostname)
    if not _DOMAIN_RE.match(hostname):
        raise HTTPException(status_code=400, detail="Invalid domain format")

    service = _service(request)
    if hostname == service.cname_target or hostname.endswith(
        f".{service.cname_target}"
    ):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot register subdomains of {service.cname_target}",
        )

    return await _run(service.create_domain, hostname)


@router.get("/{hostname}")
async def get_domain(hostname: str, request: Request):
    """Get the current status and outstanding DNS instructions."""
    return await _run(_service(request).get_status, hostname)


@router.post("/{hostname}/verify")
async def verify_domain(hostname: str, request: Request):
    """Check the ownership TXT record."""
    return await _run(_service(request).check_verification, hostname)


@router.post("/{hostname}/dns")
async def dns_instructions(hostname: str, request: Request):
    """Advance to DNS setup and return the CNAME record to publish."""
    return await _run(_service(request).get_dns_instructions, hostname)


@router.post("/{hostname}/provision")
async def provision_domain(hostname: str, request: Request):
    """Create the custom hostname at the edge provider."""
    return await _run(_service(request).provision_domain, hostname)


@router.post("/{hostname}/sync")
async def sync_domain(hostname: str, request: Request):
    """Poll the edge provider once and record its verdict."""
    return await _run(_service(request).sync_status, hostname)
