"""
edge-domains API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.domains import router as domains_router
from .config import Settings, get_settings
from .domains.dns_lookup import ResolverDnsLookup
from .domains.provisioning import CloudflareAdapter, DryRunAdapter
from .domains.service import DomainLifecycleService
from .domains.store import InMemoryDomainStore, RedisDomainStore

logger = logging.getLogger("edge_domains")


def build_service(settings: Settings) -> DomainLifecycleService:
    """Wire the lifecycle service from settings."""
    if settings.store_backend == "redis":
        store = RedisDomainStore(
            redis_url=settings.redis_url,
            key_prefix=settings.redis_key_prefix,
        )
    else:
        store = InMemoryDomainStore()

    if settings.provider == "cloudflare":
        adapter = CloudflareAdapter(
            account_id=settings.cloudflare_account_id,
            api_token=settings.cloudflare_api_token,
            zone_id=settings.cloudflare_zone_id,
        )
    else:
        adapter = DryRunAdapter()

    dns = ResolverDnsLookup(
        nameservers=settings.dns_nameservers,
        timeout=settings.dns_timeout,
    )

    return DomainLifecycleService(
        store=store,
        dns=dns,
        adapter=adapter,
        cname_target=settings.cname_target,
        verification_key=settings.verification_key,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = build_service(settings)
        app.state.domain_service = service
        logger.info(
            f"Domain service ready (store={settings.store_backend}, "
            f"provider={settings.provider}, cname_target={service.cname_target})"
        )
        yield
        for resource in (service.store, service.adapter):
            close = getattr(resource, "close", None)
            if close is not None:
                await close()
        logger.info("Domain service stopped")

    app = FastAPI(
        title="edge-domains",
        description="Custom hostname verification and provisioning",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(domains_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok"}

    return app
