"""Tenant management module for RentWise.

Tenant records and the provisioning workflow. Routers live in ``routers``
and are mounted by the application.
"""

from .models import DepositStatus, Tenant, TenantStatus

__all__ = [
    # Models
    "Tenant",
    # Enums
    "TenantStatus",
    "DepositStatus",
]
