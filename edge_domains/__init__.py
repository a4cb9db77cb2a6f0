"""edge-domains: custom hostname lifecycle for a multi-tenant edge."""

__version__ = "0.1.0"
