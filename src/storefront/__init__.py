"""Storefront server - HTTP backend for the storefront client.

Boots through a staged pipeline (context, domains, app, listener, self
check) and serves the session-based authorization handshake.
"""

__version__ = "0.1.0"
