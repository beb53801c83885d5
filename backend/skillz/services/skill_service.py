"""
Skill service.

Catalogue management and per-user skill assessments.
"""

from datetime import date
from typing import Callable, List, Optional

from skillz.core.exceptions import ConflictError, NotFoundError
from skillz.core.logging_config import get_logger
from skillz.repositories.domain import DomainRepository
from skillz.repositories.skill import SkillRepository
from skillz.schemas.skill import DomainSkills, SkillView
from skillz.schemas.user import SkillHolder
from skillz.services.formatters import format_user, group_user_skills


logger = get_logger(__name__)


def _skill_view(row: dict) -> SkillView:
    return SkillView(
        id=row["id"],
        name=row["name"],
        domain_id=row.get("domain_id"),
        domain=row.get("domain_name"),
        color=row.get("domain_color"),
    )


class SkillService:
    """
    Skill operations over SkillRepository.

    Attributes:
        skill_repository: Skills and user skills data access
        domain_repository: Used to check target domains exist
        today: Clock used for experience counters
    """

    def __init__(
        self,
        skill_repository: SkillRepository,
        domain_repository: Optional[DomainRepository] = None,
        today: Callable[[], date] = date.today,
    ):
        self.skill_repository = skill_repository
        self.domain_repository = domain_repository
        self.today = today

    async def _check_domain(self, domain_id: Optional[int]) -> None:
        if domain_id is None or self.domain_repository is None:
            return
        if await self.domain_repository.find_domain_by_id(domain_id) is None:
            raise NotFoundError("Domain", domain_id)

    async def get_skills(self) -> List[SkillView]:
        rows = await self.skill_repository.get_skills()
        return [_skill_view(row) for row in rows]

    async def add_skill(self, name: str, domain_id: Optional[int] = None) -> SkillView:
        """
        Add a skill to the catalogue.

        Raises:
            ConflictError: If a skill with that name exists
            NotFoundError: If domain_id does not exist
        """
        if await self.skill_repository.find_skill_by_name(name) is not None:
            raise ConflictError(f"Skill '{name}' already exists")
        await self._check_domain(domain_id)
        row = await self.skill_repository.create_skill(name, domain_id)
        logger.info("Skill created", extra={"skill_id": row["id"], "domain_id": domain_id})
        return _skill_view(row)

    async def classify_skill(self, skill_id: int, domain_id: Optional[int]) -> SkillView:
        """
        Move a skill into a domain (None makes it unclassified).
        """
        await self._check_domain(domain_id)
        if not await self.skill_repository.set_skill_domain(skill_id, domain_id):
            raise NotFoundError("Skill", skill_id)
        logger.info("Skill classified", extra={"skill_id": skill_id, "domain_id": domain_id})
        return _skill_view(await self.skill_repository.find_skill_by_id(skill_id))

    async def delete_skill(self, skill_id: int) -> None:
        if not await self.skill_repository.delete_skill(skill_id):
            raise NotFoundError("Skill", skill_id)
        logger.info("Skill deleted", extra={"skill_id": skill_id})

    async def find_user_skills_by_id(self, user_id: int) -> List[DomainSkills]:
        """
        A user's skills grouped by domain.
        """
        rows = await self.skill_repository.find_user_skills_by_id(user_id)
        return group_user_skills(rows)

    async def add_user_skill(
        self,
        user_id: int,
        name: str,
        level: int,
        interested: bool = False,
    ) -> List[DomainSkills]:
        """
        Assess a user on a skill given by name.

        Unknown skill names are added to the catalogue, unclassified.
        Assessing the same skill again replaces level and interest.

        Returns:
            The user's skills after the change
        """
        skill = await self.skill_repository.find_skill_by_name(name)
        if skill is None:
            skill = await self.skill_repository.create_skill(name)
            logger.info("Unclassified skill created", extra={"skill_id": skill["id"]})

        existing = await self.skill_repository.find_user_skill(user_id, skill["id"])
        if existing is None:
            await self.skill_repository.add_user_skill(user_id, skill["id"], level, interested)
        else:
            await self.skill_repository.update_user_skill(existing["id"], level, interested)

        logger.info(
            "User skill saved",
            extra={"user_id": user_id, "skill_id": skill["id"], "level": level},
        )
        return await self.find_user_skills_by_id(user_id)

    async def update_user_skill(
        self,
        user_id: int,
        user_skill_id: int,
        level: int,
        interested: bool,
    ) -> List[DomainSkills]:
        if await self.skill_repository.find_user_skill_by_id(user_id, user_skill_id) is None:
            raise NotFoundError("UserSkill", user_skill_id)
        await self.skill_repository.update_user_skill(user_skill_id, level, interested)
        return await self.find_user_skills_by_id(user_id)

    async def remove_user_skill(self, user_id: int, user_skill_id: int) -> None:
        if not await self.skill_repository.delete_user_skill(user_id, user_skill_id):
            raise NotFoundError("UserSkill", user_skill_id)
        logger.info(
            "User skill removed",
            extra={"user_id": user_id, "user_skill_id": user_skill_id},
        )

    async def find_users_by_skill(self, skill_id: int) -> List[SkillHolder]:
        """
        Users assessed on a skill, strongest level first.
        """
        if await self.skill_repository.find_skill_by_id(skill_id) is None:
            raise NotFoundError("Skill", skill_id)
        rows = await self.skill_repository.find_users_by_skill(skill_id)
        today = self.today()
        return [
            SkillHolder(
                user=format_user(row, today),
                level=row["level"],
                interested=bool(row["interested"]),
            )
            for row in rows
        ]
