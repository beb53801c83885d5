"""
SQLAlchemy ORM models for Skillz.

Import models from this module to ensure they're registered with SQLAlchemy.
"""

from skillz.models.base import Base, IdMixin, TimestampMixin, ModelMixin
from skillz.models.user import User, UserRole
from skillz.models.domain import Domain
from skillz.models.skill import Skill, UserSkill

__all__ = [
    # Base classes
    "Base",
    "IdMixin",
    "TimestampMixin",
    "ModelMixin",
    # Models
    "User",
    "UserRole",
    "Domain",
    "Skill",
    "UserSkill",
]
