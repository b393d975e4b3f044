"""Adapters module - Repository implementations for the hosted backend.

This package contains concrete implementations (adapters) for the repository
interfaces:
- rest_api: Remote record store and auth provider over HTTP
"""

from .rest_api import RestApiIdentityProvider, RestApiProjectStore

__all__ = [
    "RestApiProjectStore",
    "RestApiIdentityProvider",
]
