#!/usr/bin/env python3
"""
Lifecycle demo - walks a custom hostname through every lifecycle step.

This script:
1. Registers the hostname and prints the TXT verification record
2. Checks verification
3. Prints the CNAME record to publish
4. Provisions the hostname at the edge provider
5. Syncs the provider status until it settles (or --max-polls is reached)

By default DNS answers are simulated and the provider is a dry run, so the
whole flow completes offline. With --cloudflare the real resolver and the
Cloudflare API are used (EDGE_DOMAINS_CLOUDFLARE_* must be set).

Usage:
    python scripts/lifecycle_demo.py --hostname shop.customer.com
    python scripts/lifecycle_demo.py --hostname shop.customer.com --cloudflare
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path for edge_domains import
sys.path.insert(0, str(Path(__file__).parent.parent))

from edge_domains.config import Settings
from edge_domains.domains.dns_lookup import ResolverDnsLookup, StaticDnsLookup
from edge_domains.domains.errors import DomainError
from edge_domains.domains.models import DomainStatus
from edge_domains.domains.provisioning import CloudflareAdapter, DryRunAdapter
from edge_domains.domains.service import DomainLifecycleService
from edge_domains.domains.store import InMemoryDomainStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("lifecycle_demo")


def show(step: str, instructions) -> None:
    print(f"\n=== {step} ===")
    print(json.dumps(instructions.to_dict(), indent=2))


async def run(args) -> int:
    settings = Settings()
    cname_target = args.cname_target or settings.cname_target

    adapter = None
    try:
        if args.cloudflare:
            dns = ResolverDnsLookup(
                nameservers=settings.dns_nameservers,
                timeout=settings.dns_timeout,
            )
            adapter = CloudflareAdapter(
                account_id=settings.cloudflare_account_id,
                api_token=settings.cloudflare_api_token,
                zone_id=settings.cloudflare_zone_id,
            )
        else:
            dns = StaticDnsLookup()
            adapter = DryRunAdapter()

        service = DomainLifecycleService(
            store=InMemoryDomainStore(),
            dns=dns,
            adapter=adapter,
            cname_target=cname_target,
            verification_key=settings.verification_key,
        )

        created = await service.create_domain(args.hostname)
        show("create_domain", created)

        if isinstance(dns, StaticDnsLookup):
            # Simulate the customer publishing both records
            dns.set_txt(created.verification.name, [created.verification.value])
            dns.set_cname(created.hostname, [cname_target])

        show("check_verification", await service.check_verification(args.hostname))
        show("get_dns_instructions", await service.get_dns_instructions(args.hostname))
        show("provision_domain", await service.provision_domain(args.hostname))

        for attempt in range(1, args.max_polls + 1):
            synced = await service.sync_status(args.hostname)
            show(f"sync_status ({attempt})", synced)
            if synced.status in (DomainStatus.ACTIVE, DomainStatus.FAILED):
                break
            await asyncio.sleep(args.poll_interval)
    except DomainError as e:
        logger.error(f"Lifecycle stopped [{e.kind.value}]: {e}")
        return 1
    finally:
        if isinstance(adapter, CloudflareAdapter):
            await adapter.close()

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Walk a custom hostname through the domain lifecycle"
    )
    parser.add_argument(
        "--hostname",
        required=True,
        help="Customer hostname to onboard"
    )
    parser.add_argument(
        "--cname-target",
        default=None,
        help="Edge hostname to CNAME to (default: EDGE_DOMAINS_CNAME_TARGET)"
    )
    parser.add_argument(
        "--cloudflare",
        action="store_true",
        help="Use real DNS and the Cloudflare API instead of a dry run"
    )
    parser.add_argument(
        "--max-polls",
        type=int,
        default=5,
        help="Maximum sync_status calls (default: 5)"
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=10.0,
        help="Seconds between sync_status calls (default: 10)"
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
