"""
User and role models.

A user is an employee of the directory: identity, contact details,
diploma year (drives the experience counter) and an optional manager.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from skillz.models.base import Base, IdMixin, TimestampMixin, ModelMixin


class User(Base, IdMixin, TimestampMixin, ModelMixin):
    """
    Employee record.

    Attributes:
        id: Integer primary key
        name: Display name ("Christophe Heubès")
        email: Login and gravatar identity (unique)
        password: Bcrypt hash (never store plaintext)
        diploma: Graduation year as text ("2010"), optional
        phone: Phone number, optional
        address: JSON-encoded address object, optional
        manager_id: Another user managing this one, optional
    """

    __tablename__ = "users"

    name = Column(String(255), nullable=False, doc="Display name")

    email = Column(
        String(255),
        nullable=False,
        unique=True,
        doc="Login email (unique)"
    )

    password = Column(
        String(255),
        nullable=True,
        doc="Bcrypt-hashed password"
    )

    diploma = Column(String(4), nullable=True, doc="Graduation year")

    phone = Column(String(32), nullable=True)

    address = Column(Text, nullable=True, doc="JSON-encoded address")

    manager_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        doc="Manager (users.id)"
    )

    manager = relationship("User", remote_side="User.id", foreign_keys=[manager_id])

    roles = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    skills = relationship(
        "UserSkill",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_users_manager", "manager_id"),
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r})"


class UserRole(Base, IdMixin):
    """
    Role granted to a user ("Admin", "Manager").
    """

    __tablename__ = "user_roles"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    role = Column(String(64), nullable=False)

    user = relationship("User", back_populates="roles")

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
        Index("idx_user_roles_role", "role"),
    )
