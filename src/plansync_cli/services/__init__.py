"""Services module for PlanSync CLI - Business logic layer."""

from .config_service import ConfigService, get_config_service
from .identity_service import IdentityService
from .project_sync_service import ProjectSyncService

__all__ = [
    "ConfigService",
    "get_config_service",
    "IdentityService",
    "ProjectSyncService",
]
