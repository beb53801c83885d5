"""
Domain service: competency categories and their skills.
"""

from typing import Any, Dict, List, Optional

from skillz.core.exceptions import ConflictError, NotFoundError
from skillz.core.logging_config import get_logger
from skillz.repositories.domain import DomainRepository
from skillz.schemas.domain import DomainSkillRef, DomainView, DomainWithSkills


logger = get_logger(__name__)


class DomainService:
    """
    Domain operations over DomainRepository.
    """

    def __init__(self, domain_repository: DomainRepository):
        self.domain_repository = domain_repository

    async def get_domains(self) -> List[DomainView]:
        rows = await self.domain_repository.get_domains()
        return [DomainView(**row) for row in rows]

    async def get_domains_with_skills(self) -> List[DomainWithSkills]:
        """
        Domains with their skills, merged from one row per (domain, skill).
        """
        domains: Dict[int, DomainWithSkills] = {}
        for row in await self.domain_repository.get_domains_with_skills():
            domain = domains.get(row["domain_id"])
            if domain is None:
                domain = DomainWithSkills(
                    id=row["domain_id"],
                    name=row["domain_name"],
                    color=row["domain_color"],
                )
                domains[row["domain_id"]] = domain
            if row["skill_id"] is not None:
                domain.skills.append(DomainSkillRef(id=row["skill_id"], name=row["skill_name"]))
        return list(domains.values())

    async def add_domain(self, name: str, color: Optional[str] = None) -> DomainView:
        """
        Create a domain.

        Raises:
            ConflictError: If the name is taken
        """
        if await self.domain_repository.name_exists(name):
            raise ConflictError(f"Domain '{name}' already exists")
        row = await self.domain_repository.add_domain(name, color)
        logger.info("Domain created", extra={"domain_id": row["id"], "domain_name": row["name"]})
        return DomainView(**row)

    async def update_domain(self, domain_id: int, changes: Dict[str, Any]) -> DomainView:
        """
        Rename and/or recolor a domain.
        """
        name = changes.get("name")
        if name is not None and await self.domain_repository.name_exists(name, exclude_id=domain_id):
            raise ConflictError(f"Domain '{name}' already exists")
        if not await self.domain_repository.update_domain(domain_id, changes):
            raise NotFoundError("Domain", domain_id)
        logger.info("Domain updated", extra={"domain_id": domain_id})
        return DomainView(**await self.domain_repository.find_domain_by_id(domain_id))

    async def delete_domain(self, domain_id: int) -> None:
        """
        Delete a domain; its skills become unclassified.
        """
        if not await self.domain_repository.delete_domain(domain_id):
            raise NotFoundError("Domain", domain_id)
        logger.info("Domain deleted", extra={"domain_id": domain_id})
