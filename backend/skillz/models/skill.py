"""
Skill catalogue and per-user skill assessments.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import relationship

from skillz.models.base import Base, IdMixin, TimestampMixin, ModelMixin


class Skill(Base, IdMixin, ModelMixin):
    """
    A named capability ("Ionic", "tensorflow").

    A skill without a domain is unclassified.
    """

    __tablename__ = "skills"

    name = Column(String(255), nullable=False, unique=True)

    domain_id = Column(
        Integer,
        ForeignKey("domains.id", ondelete="SET NULL"),
        nullable=True,
    )

    domain = relationship("Domain", back_populates="skills")

    users = relationship(
        "UserSkill",
        back_populates="skill",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class UserSkill(Base, IdMixin, TimestampMixin, ModelMixin):
    """
    A user's self-assessment on one skill.

    Attributes:
        level: 0 (none) to 3 (expert)
        interested: Whether the user wants to work with the skill
        updated_at: The "skill date" shown in the updates feed
    """

    __tablename__ = "user_skills"

    MIN_LEVEL = 0
    MAX_LEVEL = 3

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    skill_id = Column(
        Integer,
        ForeignKey("skills.id", ondelete="CASCADE"),
        nullable=False,
    )

    level = Column(Integer, nullable=False, default=0)

    interested = Column(Boolean, nullable=False, default=False, server_default=false())

    user = relationship("User", back_populates="skills")
    skill = relationship("Skill", back_populates="users")

    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_skill"),
        CheckConstraint("level >= 0 AND level <= 3", name="ck_user_skills_level"),
        Index("idx_user_skills_updated_at", "updated_at"),
    )
