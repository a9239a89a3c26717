"""
Permission Core - level-based access control.
"""

from achievement_registry.kernel.permissions.permission_service import (
    PermissionGate,
    RegistryPolicy,
)

__all__ = [
    "PermissionGate",
    "RegistryPolicy",
]
