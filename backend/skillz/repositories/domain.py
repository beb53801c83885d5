"""
Domain repository for domain CRUD operations.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillz.models.domain import Domain
from skillz.models.skill import Skill


class DomainRepository:
    """
    Repository for domain data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_domains(self) -> List[Dict[str, Any]]:
        """
        All domains ordered by name.

        Returns:
            Rows with id, name, color
        """
        stmt = select(Domain.id, Domain.name, Domain.color).order_by(Domain.name)
        result = await self.session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def get_domains_with_skills(self) -> List[Dict[str, Any]]:
        """
        One row per (domain, skill); domains without skills appear once
        with NULL skill columns.

        Returns:
            Rows with domain_id, domain_name, domain_color, skill_id, skill_name
        """
        stmt = (
            select(
                Domain.id.label("domain_id"),
                Domain.name.label("domain_name"),
                Domain.color.label("domain_color"),
                Skill.id.label("skill_id"),
                Skill.name.label("skill_name"),
            )
            .outerjoin(Skill, Skill.domain_id == Domain.id)
            .order_by(Domain.name, Skill.name)
        )
        result = await self.session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def find_domain_by_id(self, domain_id: int) -> Optional[Dict[str, Any]]:
        stmt = select(Domain.id, Domain.name, Domain.color).where(Domain.id == domain_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """
        Check whether a domain name is taken (case-insensitive).

        Args:
            name: Domain name to check
            exclude_id: Ignore this domain (used when renaming)
        """
        stmt = select(Domain.id).where(func.lower(Domain.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Domain.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add_domain(self, name: str, color: Optional[str] = None) -> Dict[str, Any]:
        domain = Domain(name=name.strip(), color=color)
        self.session.add(domain)
        await self.session.flush()
        return {"id": domain.id, "name": domain.name, "color": domain.color}

    async def update_domain(self, domain_id: int, changes: Dict[str, Any]) -> bool:
        values = {key: changes[key] for key in ("name", "color") if key in changes}
        if not values:
            return await self.find_domain_by_id(domain_id) is not None
        stmt = update(Domain).where(Domain.id == domain_id).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete_domain(self, domain_id: int) -> bool:
        result = await self.session.execute(delete(Domain).where(Domain.id == domain_id))
        return result.rowcount > 0
