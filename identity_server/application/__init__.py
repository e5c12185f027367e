"""Application layer: DTOs, ports (protocols), and services.

Services orchestrate repositories and the identity provider client; they
depend on protocols only, never on SQLAlchemy or httpx directly.
"""
