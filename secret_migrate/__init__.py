"""Tenant secret migration.

Moves tenant credentials out of a shared secret store into per-tenant
destination scopes, driven by an organization-to-destination CSV mapping.
"""

__version__ = "0.1.0"
