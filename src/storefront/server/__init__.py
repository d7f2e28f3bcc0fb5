"""HTTP server for the storefront API.

API Endpoints:
    GET  /health - Health check (used by the startup verifier)
    POST /query - Run one resolver field
    POST /login - Begin the authorization handshake
    GET  /authorize - Complete the handshake and open a session
    POST /logout - Begin session termination
    GET  /deauthorize - End the session
    GET  /session/test - Report session validity
"""

from .app import ResolverSchema, ServableApp, compose_app
from .server import ServerHandle, start

__all__ = [
    "ResolverSchema",
    "ServableApp",
    "ServerHandle",
    "compose_app",
    "start",
]
