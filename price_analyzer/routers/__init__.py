"""API routers module."""
