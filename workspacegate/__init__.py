"""Workspace resolution and policy enforcement for multi-tenant requests."""

__version__ = "0.1.0"
