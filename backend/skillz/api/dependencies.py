"""
FastAPI dependency functions.

Provides reusable dependency injection functions for FastAPI routes:
database sessions, repositories, services, authentication and role
checks.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from skillz.core.config import settings
from skillz.core.database import get_db
from skillz.core.security import CurrentUser, decode_access_token
from skillz.repositories.domain import DomainRepository
from skillz.repositories.skill import SkillRepository
from skillz.repositories.user import UserRepository
from skillz.services.domain_service import DomainService
from skillz.services.skill_service import SkillService
from skillz.services.user_service import UserService


# HTTP Bearer token scheme; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def get_user_repository(db: DatabaseSession) -> UserRepository:
    return UserRepository(db)


def get_skill_repository(db: DatabaseSession) -> SkillRepository:
    return SkillRepository(db)


def get_domain_repository(db: DatabaseSession) -> DomainRepository:
    return DomainRepository(db)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
SkillRepo = Annotated[SkillRepository, Depends(get_skill_repository)]
DomainRepo = Annotated[DomainRepository, Depends(get_domain_repository)]


def get_skill_service(skill_repo: SkillRepo, domain_repo: DomainRepo) -> SkillService:
    return SkillService(skill_repo, domain_repo)


def get_domain_service(domain_repo: DomainRepo) -> DomainService:
    return DomainService(domain_repo)


def get_user_service(
    user_repo: UserRepo,
    skill_service: Annotated[SkillService, Depends(get_skill_service)],
) -> UserService:
    """
    Dependency to inject UserService.

    The feed size comes from ``settings.updates_limit``.
    """
    return UserService(user_repo, skill_service, updates_limit=settings.updates_limit)


UserSvc = Annotated[UserService, Depends(get_user_service)]
SkillSvc = Annotated[SkillService, Depends(get_skill_service)]
DomainSvc = Annotated[DomainService, Depends(get_domain_service)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    user_repo: UserRepo,
) -> CurrentUser:
    """
    Dependency to get the current authenticated user from JWT token.

    Extracts the bearer token from the Authorization header, decodes it
    and loads the user and their roles.

    Returns:
        CurrentUser for the authenticated user

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or user not found

    Note:
        The token should be sent in the Authorization header as:
        Authorization: Bearer <token>
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise credentials_exception

    user = await user_repo.find_user_by_id(token_data.user_id)
    if user is None:
        raise credentials_exception

    roles = await user_repo.find_user_roles_by_id(user["id"])
    return CurrentUser(id=user["id"], name=user["name"], email=user["email"], roles=roles)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


async def require_admin(current_user: CurrentUserDep) -> CurrentUser:
    """
    Dependency restricting a route to holders of the Admin role.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return current_user


AdminUser = Annotated[CurrentUser, Depends(require_admin)]


def ensure_self_or_admin(current_user: CurrentUser, user_id: int) -> None:
    """
    Raise 403 unless the caller is the addressed user or an admin.
    """
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to modify another user",
        )
