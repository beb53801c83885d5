"""
User service.

Shapes repository rows into the user views consumed by the API:
listings (default, mobile and web versions), the management
hierarchy, the skill updates feed and single user profiles.
"""

from datetime import date
from typing import Any, Callable, Dict, List, Optional

from skillz.core.exceptions import ConflictError, NotFoundError, ValidationError
from skillz.core.logging_config import get_logger
from skillz.core.security import MANAGER_ROLE, get_password_hash
from skillz.repositories.user import UserRepository
from skillz.schemas.user import (
    DomainScore,
    ManagementGroup,
    ManagerRef,
    SkillUpdate,
    UpdatedSkill,
    UserDetails,
    UserProfile,
    UserRef,
    UserUpdates,
    UserView,
    UserWebView,
)
from skillz.services.formatters import (
    experience_counter,
    format_user,
    gravatar_url,
    readable_id,
)
from skillz.services.skill_service import SkillService


logger = get_logger(__name__)


class UserService:
    """
    User operations over UserRepository.

    Attributes:
        user_repository: User data access
        skill_service: Used to group each user's skills by domain
        today: Clock used for experience counters
        updates_limit: Maximum number of rows read for the updates feed
    """

    def __init__(
        self,
        user_repository: UserRepository,
        skill_service: SkillService,
        today: Callable[[], date] = date.today,
        updates_limit: int = 50,
    ):
        self.user_repository = user_repository
        self.skill_service = skill_service
        self.today = today
        self.updates_limit = updates_limit

    async def _require_user(self, user_id: int) -> Dict[str, Any]:
        row = await self.user_repository.find_user_by_id(user_id)
        if row is None:
            raise NotFoundError("User", user_id)
        return row

    async def get_management(self) -> List[ManagementGroup]:
        """
        Users grouped by manager.

        Groups are sorted by manager name; users without a manager are
        gathered in a last group whose manager id and name are null.
        """
        groups: Dict[Optional[int], ManagementGroup] = {}
        for row in await self.user_repository.get_management():
            manager_id = row["manager_id"]
            group = groups.get(manager_id)
            if group is None:
                group = ManagementGroup(
                    manager=ManagerRef(id=manager_id, name=row["manager_name"]),
                )
                groups[manager_id] = group
            group.users.append(UserRef(id=row["user_id"], name=row["user_name"]))

        return sorted(
            groups.values(),
            key=lambda g: (g.manager.name is None, (g.manager.name or "").lower()),
        )

    async def attach_manager(self, user: UserProfile) -> UserProfile:
        """
        Fill ``user.manager`` from ``user.manager_id``.

        A user without a manager is returned unchanged; a dangling
        manager id leaves ``manager`` as None.
        """
        if user.manager_id is None:
            return user
        row = await self.user_repository.find_user_by_id(user.manager_id)
        user.manager = format_user(row, self.today()) if row is not None else None
        return user

    async def _details(self, row: Dict[str, Any], today: date) -> Dict[str, Any]:
        domains = await self.skill_service.find_user_skills_by_id(row["id"])
        roles = await self.user_repository.find_user_roles_by_id(row["id"])
        view = format_user(row, today)
        return {
            **view.model_dump(),
            "domains": domains,
            "roles": roles,
            "score": sum(domain.score for domain in domains),
        }

    async def find_user_by_id(self, user_id: int) -> UserProfile:
        """
        Full profile of a user: view, skills by domain, roles, score
        and manager.

        Raises:
            NotFoundError: If the user does not exist
        """
        row = await self._require_user(user_id)
        profile = UserProfile(**await self._details(row, self.today()))
        return await self.attach_manager(profile)

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> UserProfile:
        email = changes.get("email")
        if email is not None:
            existing = await self.user_repository.find_user_by_email(email)
            if existing is not None and existing["id"] != user_id:
                raise ConflictError(f"Email '{email}' is already registered")
        if not await self.user_repository.update_user(user_id, changes):
            raise NotFoundError("User", user_id)
        logger.info(
            "User updated",
            extra={"user_id": user_id, "fields": sorted(changes)},
        )
        return await self.find_user_by_id(user_id)

    async def update_password(self, user_id: int, old_password: str, new_password: str) -> None:
        await self.user_repository.update_password(user_id, old_password, new_password)
        logger.info("Password changed", extra={"user_id": user_id})

    async def update_phone(self, user_id: int, phone: Optional[str]) -> UserProfile:
        if not await self.user_repository.update_phone(user_id, phone):
            raise NotFoundError("User", user_id)
        logger.info("Phone updated", extra={"user_id": user_id})
        return await self.find_user_by_id(user_id)

    async def update_address(self, user_id: int, address: Optional[Dict[str, Any]]) -> UserProfile:
        if not await self.user_repository.update_address(user_id, address):
            raise NotFoundError("User", user_id)
        logger.info("Address updated", extra={"user_id": user_id})
        return await self.find_user_by_id(user_id)

    async def assign_manager(self, user_id: int, manager_id: Optional[int]) -> UserProfile:
        """
        Set (or clear, with None) a user's manager.

        Raises:
            ValidationError: If a user is made their own manager
            NotFoundError: If the user or the manager does not exist
        """
        if manager_id is not None:
            if manager_id == user_id:
                raise ValidationError("A user cannot be their own manager")
            await self._require_user(manager_id)
        if not await self.user_repository.assign_manager(user_id, manager_id):
            raise NotFoundError("User", user_id)
        logger.info(
            "Manager assigned",
            extra={"user_id": user_id, "manager_id": manager_id},
        )
        return await self.find_user_by_id(user_id)

    async def promote_to_manager(self, user_id: int) -> UserProfile:
        row = await self._require_user(user_id)
        await self.user_repository.add_role(row, MANAGER_ROLE)
        logger.info("User promoted to manager", extra={"user_id": user_id})
        return await self.find_user_by_id(user_id)

    async def _list_rows(self, with_roles: Optional[str]) -> List[Dict[str, Any]]:
        if with_roles:
            return await self.user_repository.get_users_with_roles(with_roles)
        return await self.user_repository.get_users()

    async def get_users(self, with_roles: Optional[str] = None) -> List[UserView]:
        today = self.today()
        return [format_user(row, today) for row in await self._list_rows(with_roles)]

    async def get_users_mobile_version(self, with_roles: Optional[str] = None) -> List[UserDetails]:
        """
        Listing where every user carries skills by domain, roles and score.
        """
        today = self.today()
        users = []
        for listed in await self._list_rows(with_roles):
            row = await self.user_repository.find_user_by_id(listed["id"])
            if row is None:
                continue
            users.append(UserDetails(**await self._details(row, today)))
        return users

    async def get_users_web_version(self, with_roles: Optional[str] = None) -> List[UserWebView]:
        """
        Listing with per-domain scores, merged from one row per
        (user, domain).
        """
        today = self.today()
        users: Dict[int, UserWebView] = {}
        for row in await self.user_repository.get_web_users_with_roles(with_roles or None):
            user = users.get(row["user_id"])
            if user is None:
                user = UserWebView(
                    id=row["user_id"],
                    name=row["user_name"],
                    readable_id=readable_id(row["user_name"]),
                    experience_counter=experience_counter(row["diploma"], today),
                    gravatar_url=gravatar_url(row["email"]),
                )
                users[row["user_id"]] = user
            if row["domain_id"] is None:
                continue
            score = int(row["domain_score"] or 0)
            user.domains.append(DomainScore(
                id=row["domain_id"],
                name=row["domain_name"],
                color=row["domain_color"],
                score=score,
            ))
            user.score += score
        return list(users.values())

    async def delete_user_by_id(self, user_id: int) -> None:
        if not await self.user_repository.delete_user_by_id(user_id):
            raise NotFoundError("User", user_id)
        logger.info("User deleted", extra={"user_id": user_id})

    async def get_updates(self) -> List[UserUpdates]:
        """
        Recent skill changes grouped by user, most recently active first.
        """
        today = self.today()
        feed: Dict[int, UserUpdates] = {}
        for row in await self.user_repository.get_updates(self.updates_limit):
            entry = feed.get(row["user_id"])
            if entry is None:
                entry = UserUpdates(user=format_user({
                    "id": row["user_id"],
                    "name": row["user_name"],
                    "email": row["user_email"],
                    "diploma": row["user_diploma"],
                }, today))
                feed[row["user_id"]] = entry
            entry.updates.append(SkillUpdate(
                id=row["user_skill_id"],
                date=row["skill_date"],
                skill=UpdatedSkill(
                    id=row["skill_id"],
                    name=row["skill_name"],
                    level=row["skill_level"],
                    interested=bool(row["skill_interested"]),
                    domain=row["domain_name"],
                    color=row["color"],
                ),
            ))
        return list(feed.values())

    async def sign_up(self, name: str, email: str, password: str) -> UserView:
        """
        Register a user with a bcrypt-hashed password.

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.user_repository.email_exists(email):
            raise ConflictError(f"Email '{email}' is already registered")
        row = await self.user_repository.create_user(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
        )
        logger.info("User signed up", extra={"user_id": row["id"]})
        return format_user(row, self.today())
