"""
Skill repository.

Data access for the skill catalogue and the per-user skill assessments.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillz.models.domain import Domain
from skillz.models.skill import Skill, UserSkill
from skillz.models.user import User


_SKILL_COLUMNS = (
    Skill.id,
    Skill.name,
    Skill.domain_id,
    Domain.name.label("domain_name"),
    Domain.color.label("domain_color"),
)


class SkillRepository:
    """
    Repository for skills and user skills.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _rows(self, stmt) -> List[Dict[str, Any]]:
        result = await self.session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def _first(self, stmt) -> Optional[Dict[str, Any]]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def get_skills(self) -> List[Dict[str, Any]]:
        """
        The whole catalogue, ordered by name.

        Returns:
            Rows with id, name, domain_id, domain_name, domain_color
        """
        stmt = (
            select(*_SKILL_COLUMNS)
            .outerjoin(Domain, Domain.id == Skill.domain_id)
            .order_by(Skill.name)
        )
        return await self._rows(stmt)

    async def find_skill_by_id(self, skill_id: int) -> Optional[Dict[str, Any]]:
        stmt = (
            select(*_SKILL_COLUMNS)
            .outerjoin(Domain, Domain.id == Skill.domain_id)
            .where(Skill.id == skill_id)
        )
        return await self._first(stmt)

    async def find_skill_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Case-insensitive lookup by name.
        """
        stmt = (
            select(*_SKILL_COLUMNS)
            .outerjoin(Domain, Domain.id == Skill.domain_id)
            .where(func.lower(Skill.name) == name.strip().lower())
        )
        return await self._first(stmt)

    async def create_skill(self, name: str, domain_id: Optional[int] = None) -> Dict[str, Any]:
        skill = Skill(name=name.strip(), domain_id=domain_id)
        self.session.add(skill)
        await self.session.flush()
        return await self.find_skill_by_id(skill.id)

    async def set_skill_domain(self, skill_id: int, domain_id: Optional[int]) -> bool:
        stmt = update(Skill).where(Skill.id == skill_id).values(domain_id=domain_id)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete_skill(self, skill_id: int) -> bool:
        result = await self.session.execute(delete(Skill).where(Skill.id == skill_id))
        return result.rowcount > 0

    async def find_user_skills_by_id(self, user_id: int) -> List[Dict[str, Any]]:
        """
        A user's skills with their domain.

        Returns:
            Rows with user_skill_id, skill_id, skill_name, level,
            interested, date, domain_id, domain_name, domain_color
        """
        stmt = (
            select(
                UserSkill.id.label("user_skill_id"),
                Skill.id.label("skill_id"),
                Skill.name.label("skill_name"),
                UserSkill.level,
                UserSkill.interested,
                UserSkill.updated_at.label("date"),
                Domain.id.label("domain_id"),
                Domain.name.label("domain_name"),
                Domain.color.label("domain_color"),
            )
            .select_from(UserSkill)
            .join(Skill, Skill.id == UserSkill.skill_id)
            .outerjoin(Domain, Domain.id == Skill.domain_id)
            .where(UserSkill.user_id == user_id)
            .order_by(Domain.name, UserSkill.level.desc(), Skill.name)
        )
        return await self._rows(stmt)

    async def find_user_skill(self, user_id: int, skill_id: int) -> Optional[Dict[str, Any]]:
        stmt = select(
            UserSkill.id, UserSkill.user_id, UserSkill.skill_id,
            UserSkill.level, UserSkill.interested,
        ).where(UserSkill.user_id == user_id, UserSkill.skill_id == skill_id)
        return await self._first(stmt)

    async def find_user_skill_by_id(self, user_id: int, user_skill_id: int) -> Optional[Dict[str, Any]]:
        stmt = select(
            UserSkill.id, UserSkill.user_id, UserSkill.skill_id,
            UserSkill.level, UserSkill.interested,
        ).where(UserSkill.user_id == user_id, UserSkill.id == user_skill_id)
        return await self._first(stmt)

    async def add_user_skill(
        self,
        user_id: int,
        skill_id: int,
        level: int,
        interested: bool,
    ) -> int:
        """
        Record a new assessment.

        Returns:
            The user skill id
        """
        user_skill = UserSkill(
            user_id=user_id,
            skill_id=skill_id,
            level=level,
            interested=interested,
        )
        self.session.add(user_skill)
        await self.session.flush()
        return user_skill.id

    async def update_user_skill(self, user_skill_id: int, level: int, interested: bool) -> bool:
        stmt = (
            update(UserSkill)
            .where(UserSkill.id == user_skill_id)
            .values(level=level, interested=interested)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete_user_skill(self, user_id: int, user_skill_id: int) -> bool:
        stmt = delete(UserSkill).where(
            UserSkill.id == user_skill_id, UserSkill.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def find_users_by_skill(self, skill_id: int) -> List[Dict[str, Any]]:
        """
        Users assessed on a skill, strongest level first.

        Returns:
            Rows with the user columns (id, name, email, diploma, phone,
            address, manager_id) plus level and interested
        """
        stmt = (
            select(
                User.id,
                User.name,
                User.email,
                User.diploma,
                User.phone,
                User.address,
                User.manager_id,
                UserSkill.level,
                UserSkill.interested,
            )
            .select_from(UserSkill)
            .join(User, User.id == UserSkill.user_id)
            .where(UserSkill.skill_id == skill_id)
            .order_by(UserSkill.level.desc(), UserSkill.interested.desc(), User.name)
        )
        return await self._rows(stmt)
