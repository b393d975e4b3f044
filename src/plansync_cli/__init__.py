"""PlanSync CLI - save, share and restore project plans."""

__version__ = "0.1.0"
