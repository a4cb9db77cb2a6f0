"""
Pytest configuration for edge-domains tests.
"""

import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables
os.environ["EDGE_DOMAINS_DEBUG"] = "true"
os.environ["EDGE_DOMAINS_CNAME_TARGET"] = "edge.example.com"
os.environ["EDGE_DOMAINS_PROVIDER"] = "dry_run"
os.environ["EDGE_DOMAINS_STORE_BACKEND"] = "memory"

CNAME_TARGET = "edge.example.com"


@pytest.fixture
def test_settings():
    """Provide test settings."""
    from edge_domains.config import Settings
    return Settings()


@pytest.fixture
def store():
    """Provide an empty in-memory domain store."""
    from edge_domains.domains.store import InMemoryDomainStore
    return InMemoryDomainStore()


@pytest.fixture
def mock_dns():
    """DNS lookup that finds nothing until a test says otherwise."""
    dns = MagicMock()
    dns.resolve_txt = AsyncMock(return_value=[])
    dns.resolve_cname = AsyncMock(return_value=[])
    dns.resolve_a = AsyncMock(return_value=[])
    return dns


@pytest.fixture
def mock_adapter():
    """Provisioning adapter that accepts hostnames and reports pending."""
    from edge_domains.domains.provisioning import HostnameStatus

    adapter = MagicMock()
    adapter.create_custom_hostname = AsyncMock(return_value="cf-123")
    adapter.get_custom_hostname_status = AsyncMock(
        return_value=HostnameStatus(status="pending", id="cf-123")
    )
    adapter.delete_custom_hostname = AsyncMock(return_value=None)
    return adapter


@pytest.fixture
def service(store, mock_dns, mock_adapter):
    """Provide a lifecycle service over the in-memory store and mocks."""
    from edge_domains.domains.service import DomainLifecycleService
    return DomainLifecycleService(
        store=store,
        dns=mock_dns,
        adapter=mock_adapter,
        cname_target=CNAME_TARGET,
    )
