"""Helpers backing the FastAPI routes in ``chatgate.service.app``."""
