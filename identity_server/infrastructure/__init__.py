"""Infrastructure: SQLAlchemy persistence and external service clients.

Implements the protocols in identity_server.application.interfaces.
"""
