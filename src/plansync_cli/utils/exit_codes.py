"""
Exit codes for PlanSync CLI.

Semantic exit codes so scripts can tell what went wrong without parsing
output. Every error kind maps to exactly one code.
"""

from plansync_cli.models import ErrorKind

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (not logged in, invalid credentials, etc.)
ERROR_AUTH_FAILURE = 3

# Network or store error (server unreachable, timeout, etc.)
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Permission denied
ERROR_PERMISSION_DENIED = 6

EXIT_CODES_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: ERROR_INVALID_ARGS,
    ErrorKind.NOT_AUTHENTICATED: ERROR_AUTH_FAILURE,
    ErrorKind.STORE_UNAVAILABLE: ERROR_NETWORK,
    ErrorKind.NOT_FOUND: ERROR_NOT_FOUND,
    ErrorKind.ACCESS_DENIED: ERROR_PERMISSION_DENIED,
}


def exit_code_for(kind: ErrorKind | None) -> int:
    """Get the exit code for an error kind."""
    if kind is None:
        return ERROR_GENERAL
    return EXIT_CODES_BY_KIND.get(kind, ERROR_GENERAL)


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
        ERROR_NETWORK: "ERROR_NETWORK",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_PERMISSION_DENIED: "ERROR_PERMISSION_DENIED",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_AUTH_FAILURE: "Authentication failure - please sign in",
        ERROR_NETWORK: "Network or store error - check connection",
        ERROR_NOT_FOUND: "Project not found",
        ERROR_PERMISSION_DENIED: "Permission denied",
    }
    return descriptions.get(code, "Unknown error")
