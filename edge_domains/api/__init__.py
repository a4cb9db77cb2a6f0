"""API routers for edge-domains."""
