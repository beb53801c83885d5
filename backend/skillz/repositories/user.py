"""
User repository.

Provides the data access layer for users, roles, the management
hierarchy and the skill updates feed. Queries return flat row
dictionaries; shaping them into views is the services' job.
"""

import json
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from skillz.core.exceptions import InvalidPasswordError, NotFoundError
from skillz.core.security import get_password_hash, verify_password
from skillz.models.domain import Domain
from skillz.models.skill import Skill, UserSkill
from skillz.models.user import User, UserRole


# Fields a user may change through update_user
UPDATABLE_FIELDS = ("name", "email", "diploma")

_USER_COLUMNS = (
    User.id,
    User.name,
    User.email,
    User.diploma,
    User.phone,
    User.address,
    User.manager_id,
)


class UserRepository:
    """
    Repository for user data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _rows(self, stmt) -> List[Dict[str, Any]]:
        result = await self.session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def _first(self, stmt) -> Optional[Dict[str, Any]]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def get_users(self) -> List[Dict[str, Any]]:
        """
        All users ordered by name.

        Returns:
            Rows with id, name, email, diploma, phone, address, manager_id
        """
        stmt = select(*_USER_COLUMNS).order_by(User.name, User.id)
        return await self._rows(stmt)

    async def get_users_with_roles(self, role: str) -> List[Dict[str, Any]]:
        """
        Users holding the given role, ordered by name.

        Args:
            role: Role name, e.g. "Manager"
        """
        stmt = (
            select(*_USER_COLUMNS)
            .join(UserRole, UserRole.user_id == User.id)
            .where(UserRole.role == role)
            .order_by(User.name, User.id)
        )
        return await self._rows(stmt)

    async def get_web_users_with_roles(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        One row per (user, domain) with the user's summed level in that domain.

        Users without any skill produce a single row whose domain columns
        are NULL.

        Args:
            role: Only users holding this role when given

        Returns:
            Rows with user_id, user_name, email, diploma, domain_id,
            domain_name, domain_color, domain_score
        """
        stmt = (
            select(
                User.id.label("user_id"),
                User.name.label("user_name"),
                User.email,
                User.diploma,
                Domain.id.label("domain_id"),
                Domain.name.label("domain_name"),
                Domain.color.label("domain_color"),
                func.coalesce(func.sum(UserSkill.level), 0).label("domain_score"),
            )
            .select_from(User)
            .outerjoin(UserSkill, UserSkill.user_id == User.id)
            .outerjoin(Skill, Skill.id == UserSkill.skill_id)
            .outerjoin(Domain, Domain.id == Skill.domain_id)
            .group_by(
                User.id, User.name, User.email, User.diploma,
                Domain.id, Domain.name, Domain.color,
            )
            .order_by(User.name, User.id, Domain.name)
        )
        if role is not None:
            stmt = stmt.where(
                User.id.in_(select(UserRole.user_id).where(UserRole.role == role))
            )
        return await self._rows(stmt)

    async def find_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """
        Retrieve a user row by id.

        Returns:
            Row dict if found, None otherwise
        """
        stmt = select(*_USER_COLUMNS).where(User.id == user_id)
        return await self._first(stmt)

    async def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a user row by email, including the password hash.

        Used for authentication only; never return this row to clients.
        """
        stmt = select(*_USER_COLUMNS, User.password).where(
            func.lower(User.email) == email.strip().lower()
        )
        return await self._first(stmt)

    async def email_exists(self, email: str) -> bool:
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def find_user_roles_by_id(self, user_id: int) -> List[str]:
        """
        Role names of a user, alphabetical.
        """
        stmt = (
            select(UserRole.role)
            .where(UserRole.user_id == user_id)
            .order_by(UserRole.role)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_user(
        self,
        name: str,
        email: str,
        hashed_password: Optional[str] = None,
        diploma: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Insert a user.

        Returns:
            The new user row
        """
        user = User(
            name=name,
            email=email.strip().lower(),
            password=hashed_password,
            diploma=diploma,
        )
        self.session.add(user)
        await self.session.flush()
        return await self.find_user_by_id(user.id)

    async def _update(self, user_id: int, values: Dict[str, Any]) -> bool:
        if not values:
            return await self.find_user_by_id(user_id) is not None
        stmt = update(User).where(User.id == user_id).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> bool:
        """
        Update name, email and/or diploma.

        Keys outside UPDATABLE_FIELDS are ignored.

        Returns:
            True if the user exists
        """
        values = {key: changes[key] for key in UPDATABLE_FIELDS if key in changes}
        if "email" in values and values["email"] is not None:
            values["email"] = values["email"].strip().lower()
        return await self._update(user_id, values)

    async def update_password(self, user_id: int, old_password: str, new_password: str) -> None:
        """
        Replace the password after checking the current one.

        Raises:
            NotFoundError: If the user does not exist
            InvalidPasswordError: If old_password does not match
        """
        result = await self.session.execute(select(User.password).where(User.id == user_id))
        row = result.first()
        if row is None:
            raise NotFoundError("User", user_id)
        if not verify_password(old_password, row.password):
            raise InvalidPasswordError()
        await self._update(user_id, {"password": get_password_hash(new_password)})

    async def update_phone(self, user_id: int, phone: Optional[str]) -> bool:
        return await self._update(user_id, {"phone": phone})

    async def update_address(self, user_id: int, address: Optional[Dict[str, Any]]) -> bool:
        """
        Store the address object as JSON (None clears it).
        """
        encoded = json.dumps(address, ensure_ascii=False) if address is not None else None
        return await self._update(user_id, {"address": encoded})

    async def assign_manager(self, user_id: int, manager_id: Optional[int]) -> bool:
        return await self._update(user_id, {"manager_id": manager_id})

    async def add_role(self, user: Dict[str, Any], role: str) -> None:
        """
        Grant a role to a user row; granting it twice is a no-op.
        """
        stmt = select(UserRole.id).where(
            UserRole.user_id == user["id"], UserRole.role == role
        )
        result = await self.session.execute(stmt)
        if result.first() is not None:
            return
        self.session.add(UserRole(user_id=user["id"], role=role))
        await self.session.flush()

    async def delete_user_by_id(self, user_id: int) -> bool:
        """
        Delete a user; roles and skills cascade, managed users lose
        their manager.

        Returns:
            True if a user was deleted
        """
        result = await self.session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0

    async def get_management(self) -> List[Dict[str, Any]]:
        """
        Every user with their manager's id and name (NULL when none).

        Returns:
            Rows with user_id, user_name, manager_id, manager_name
        """
        manager = aliased(User)
        stmt = (
            select(
                User.id.label("user_id"),
                User.name.label("user_name"),
                manager.id.label("manager_id"),
                manager.name.label("manager_name"),
            )
            .outerjoin(manager, manager.id == User.manager_id)
            .order_by(User.name, User.id)
        )
        return await self._rows(stmt)

    async def get_updates(self, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Most recent user skill changes, newest first.

        Returns:
            Rows with user_id, user_name, user_email, user_diploma,
            skill_id, skill_name, skill_level, skill_interested,
            skill_date, user_skill_id, domain_id, domain_name, color
        """
        stmt = (
            select(
                User.id.label("user_id"),
                User.name.label("user_name"),
                User.email.label("user_email"),
                User.diploma.label("user_diploma"),
                Skill.id.label("skill_id"),
                Skill.name.label("skill_name"),
                UserSkill.level.label("skill_level"),
                UserSkill.interested.label("skill_interested"),
                UserSkill.updated_at.label("skill_date"),
                UserSkill.id.label("user_skill_id"),
                Domain.id.label("domain_id"),
                Domain.name.label("domain_name"),
                Domain.color.label("color"),
            )
            .select_from(UserSkill)
            .join(User, User.id == UserSkill.user_id)
            .join(Skill, Skill.id == UserSkill.skill_id)
            .outerjoin(Domain, Domain.id == Skill.domain_id)
            .order_by(UserSkill.updated_at.desc(), UserSkill.id.desc())
            .limit(limit)
        )
        return await self._rows(stmt)
