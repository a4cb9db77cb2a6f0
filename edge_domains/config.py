"""
Configuration management for edge-domains.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8000

    # Edge hostname every custom domain must CNAME to
    cname_target: str = "edge.example.com"
    verification_key: str = "_edge-verify"

    # Storage
    store_backend: str = "memory"  # memory | redis
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "edge_domains:"

    # DNS
    dns_nameservers: List[str] = []
    dns_timeout: float = 10.0  # seconds

    # Provisioning
    provider: str = "dry_run"  # dry_run | cloudflare
    cloudflare_account_id: str = ""
    cloudflare_api_token: str = ""
    cloudflare_zone_id: str = ""

    # Logging
    log_level: str = "INFO"

    # Debug mode
    debug: bool = False

    model_config = {
        "env_prefix": "EDGE_DOMAINS_",
        "env_file": ".env",
        "extra": "ignore"
    }

    def validate_required(self) -> bool:
        """Validate that required settings are configured."""
        if self.store_backend not in ("memory", "redis"):
            raise ValueError(
                f"EDGE_DOMAINS_STORE_BACKEND must be 'memory' or 'redis', "
                f"got {self.store_backend!r}"
            )
        if self.provider not in ("dry_run", "cloudflare"):
            raise ValueError(
                f"EDGE_DOMAINS_PROVIDER must be 'dry_run' or 'cloudflare', "
                f"got {self.provider!r}"
            )
        if self.provider == "cloudflare":
            missing = [
                name for name in (
                    "cloudflare_account_id",
                    "cloudflare_api_token",
                    "cloudflare_zone_id",
                )
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    "Cloudflare provider requires "
                    + ", ".join(f"EDGE_DOMAINS_{m.upper()}" for m in missing)
                )
        return True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    # In debug mode a bad config is only a warning
    if settings.debug:
        try:
            settings.validate_required()
        except ValueError as e:
            logging.warning(f"Configuration warning: {e}")
    else:
        settings.validate_required()
    return settings
