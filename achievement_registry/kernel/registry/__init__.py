"""
Record Registry - storage, allocation and lifecycle of academic records.
"""

from achievement_registry.kernel.registry.registry_service import AchievementRegistry

__all__ = ["AchievementRegistry"]
