"""Typer command groups for PlanSync CLI."""
