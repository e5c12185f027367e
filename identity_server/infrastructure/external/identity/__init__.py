"""Remote identity provider clients."""

from identity_server.infrastructure.external.identity.client import Auth0IdentityClient

__all__ = ["Auth0IdentityClient"]
