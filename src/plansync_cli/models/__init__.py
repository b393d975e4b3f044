"""PlanSync domain models.

Pydantic models for project plans, identities and configuration, plus the
error taxonomy shared by every layer.
"""

from .config_models import AppConfig, AuthConfig, OutputConfig, StoreConfig
from .core import (
    TITLE_MAX_LENGTH,
    AuthSession,
    Identity,
    Project,
    ProjectData,
    ProjectPayload,
    ProjectQuery,
    ProjectRecord,
    derive_title,
    truncate_utf16,
    utf16_length,
)
from .errors import (
    AccessDeniedError,
    ErrorKind,
    NotAuthenticatedError,
    NotFoundError,
    PlanSyncError,
    Result,
    StoreUnavailableError,
    ValidationError,
    error_for,
)

__all__ = [
    # Project models
    "Project",
    "ProjectData",
    "ProjectPayload",
    "ProjectQuery",
    "ProjectRecord",
    "TITLE_MAX_LENGTH",
    "derive_title",
    "truncate_utf16",
    "utf16_length",
    # Identity models
    "Identity",
    "AuthSession",
    # Errors
    "ErrorKind",
    "PlanSyncError",
    "NotAuthenticatedError",
    "AccessDeniedError",
    "NotFoundError",
    "ValidationError",
    "StoreUnavailableError",
    "Result",
    "error_for",
    # Config models
    "AppConfig",
    "StoreConfig",
    "AuthConfig",
    "OutputConfig",
]
