"""Repository interfaces for PlanSync CLI.

Abstract base classes defining the contracts for the remote collaborators
of the sync layer. These are the "Ports" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- plansync_cli.adapters.rest_api (remote record store and auth provider)
"""

from .repository import IdentityProvider, ProjectStore

__all__ = [
    "ProjectStore",
    "IdentityProvider",
]
