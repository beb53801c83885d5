"""
User endpoints.

Listings (default, mobile and web versions), the management hierarchy,
the skill updates feed, profile changes and per-user skills.
"""

from typing import Any, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from skillz.api.dependencies import (
    AdminUser,
    CurrentUserDep,
    SkillSvc,
    UserRepo,
    UserSvc,
    ensure_self_or_admin,
)
from skillz.core.exceptions import NotFoundError
from skillz.schemas.skill import DomainSkills, UserSkillRequest, UserSkillUpdateRequest
from skillz.schemas.user import (
    AddressUpdateRequest,
    ManagementGroup,
    ManagerAssignRequest,
    PasswordChangeRequest,
    PhoneUpdateRequest,
    UserProfile,
    UserUpdateRequest,
    UserUpdates,
)


router = APIRouter(tags=["users"])


async def _require_user(user_repo: UserRepo, user_id: int) -> None:
    if await user_repo.find_user_by_id(user_id) is None:
        raise NotFoundError("User", user_id)


@router.get(
    "/users",
    response_model=None,
    summary="List users",
    description=(
        "Users ordered by name. `version=mobile` adds skills by domain, roles "
        "and score; `version=web` adds per-domain scores."
    ),
)
async def list_users(
    user_service: UserSvc,
    current_user: CurrentUserDep,
    with_roles: Optional[str] = Query(default=None, description="Only users holding this role"),
    version: Literal["default", "mobile", "web"] = "default",
) -> List[Any]:
    """
    List users.

    Returns:
        User views, shaped by ``version``
    """
    if version == "mobile":
        return await user_service.get_users_mobile_version(with_roles)
    if version == "web":
        return await user_service.get_users_web_version(with_roles)
    return await user_service.get_users(with_roles)


@router.get(
    "/users/management",
    response_model=List[ManagementGroup],
    summary="Management hierarchy",
    description="Users grouped by manager; users without a manager come last.",
)
async def get_management(
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> List[ManagementGroup]:
    return await user_service.get_management()


@router.get(
    "/users/updates",
    response_model=List[UserUpdates],
    summary="Recent skill updates",
    description="Latest user skill changes grouped by user.",
)
async def get_updates(
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> List[UserUpdates]:
    return await user_service.get_updates()


@router.get(
    "/users/{user_id}",
    response_model=UserProfile,
    summary="Get user by ID",
)
async def get_user(
    user_id: int,
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> UserProfile:
    """
    Full profile: skills by domain, roles, score and manager.

    Raises:
        NotFoundError (404): If the user does not exist
    """
    return await user_service.find_user_by_id(user_id)


@router.put(
    "/users/{user_id}",
    response_model=UserProfile,
    summary="Update user",
    description="Change name, email and/or diploma. Self or admin.",
)
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> UserProfile:
    ensure_self_or_admin(current_user, user_id)
    return await user_service.update_user(user_id, request.model_dump(exclude_unset=True))


@router.put(
    "/users/{user_id}/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
    description="Only the user themselves can change their password.",
)
async def update_password(
    user_id: int,
    request: PasswordChangeRequest,
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> Response:
    """
    Raises:
        HTTPException 403: If the caller is someone else
        InvalidPasswordError (400): If old_password is wrong
    """
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the user can change their password",
        )
    await user_service.update_password(user_id, request.old_password, request.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/users/{user_id}/phone", response_model=UserProfile, summary="Update phone")
async def update_phone(
    user_id: int,
    request: PhoneUpdateRequest,
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> UserProfile:
    ensure_self_or_admin(current_user, user_id)
    return await user_service.update_phone(user_id, request.phone)


@router.put("/users/{user_id}/address", response_model=UserProfile, summary="Update address")
async def update_address(
    user_id: int,
    request: AddressUpdateRequest,
    user_service: UserSvc,
    current_user: CurrentUserDep,
) -> UserProfile:
    ensure_self_or_admin(current_user, user_id)
    return await user_service.update_address(user_id, request.address)


@router.put(
    "/users/{user_id}/manager",
    response_model=UserProfile,
    summary="Assign manager",
    description="Set or clear (null) a user's manager. Admin only.",
)
async def assign_manager(
    user_id: int,
    request: ManagerAssignRequest,
    user_service: UserSvc,
    current_user: AdminUser,
) -> UserProfile:
    return await user_service.assign_manager(user_id, request.manager_id)


@router.post(
    "/users/{user_id}/promote",
    response_model=UserProfile,
    summary="Promote to manager",
    description="Grant the Manager role. Admin only.",
)
async def promote_to_manager(
    user_id: int,
    user_service: UserSvc,
    current_user: AdminUser,
) -> UserProfile:
    return await user_service.promote_to_manager(user_id)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete a user with their roles and skills. Admin only.",
)
async def delete_user(
    user_id: int,
    user_service: UserSvc,
    current_user: AdminUser,
) -> Response:
    await user_service.delete_user_by_id(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/users/{user_id}/skills",
    response_model=List[DomainSkills],
    summary="User skills",
    description="A user's skills grouped by domain, unclassified last.",
)
async def get_user_skills(
    user_id: int,
    user_repo: UserRepo,
    skill_service: SkillSvc,
    current_user: CurrentUserDep,
) -> List[DomainSkills]:
    await _require_user(user_repo, user_id)
    return await skill_service.find_user_skills_by_id(user_id)


@router.post(
    "/users/{user_id}/skills",
    response_model=List[DomainSkills],
    status_code=status.HTTP_201_CREATED,
    summary="Add user skill",
    description="Assess a user on a skill by name. Unknown names create an unclassified skill.",
)
async def add_user_skill(
    user_id: int,
    request: UserSkillRequest,
    user_repo: UserRepo,
    skill_service: SkillSvc,
    current_user: CurrentUserDep,
) -> List[DomainSkills]:
    ensure_self_or_admin(current_user, user_id)
    await _require_user(user_repo, user_id)
    return await skill_service.add_user_skill(
        user_id, request.name.strip(), request.level, request.interested
    )


@router.put(
    "/users/{user_id}/skills/{user_skill_id}",
    response_model=List[DomainSkills],
    summary="Update user skill",
)
async def update_user_skill(
    user_id: int,
    user_skill_id: int,
    request: UserSkillUpdateRequest,
    skill_service: SkillSvc,
    current_user: CurrentUserDep,
) -> List[DomainSkills]:
    ensure_self_or_admin(current_user, user_id)
    return await skill_service.update_user_skill(
        user_id, user_skill_id, request.level, request.interested
    )


@router.delete(
    "/users/{user_id}/skills/{user_skill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove user skill",
)
async def remove_user_skill(
    user_id: int,
    user_skill_id: int,
    skill_service: SkillSvc,
    current_user: CurrentUserDep,
) -> Response:
    ensure_self_or_admin(current_user, user_id)
    await skill_service.remove_user_skill(user_id, user_skill_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
