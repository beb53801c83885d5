"""
Skill catalogue endpoints.
"""

from typing import List

from fastapi import APIRouter, Response, status

from skillz.api.dependencies import AdminUser, CurrentUserDep, SkillSvc
from skillz.schemas.skill import SkillCreateRequest, SkillDomainRequest, SkillView
from skillz.schemas.user import SkillHolder


router = APIRouter(tags=["skills"])


@router.get("/skills", response_model=List[SkillView], summary="List skills")
async def list_skills(
    skill_service: SkillSvc,
    current_user: CurrentUserDep,
) -> List[SkillView]:
    return await skill_service.get_skills()


@router.post(
    "/skills",
    response_model=SkillView,
    status_code=status.HTTP_201_CREATED,
    summary="Create skill",
    description="Add a skill to the catalogue, optionally inside a domain. Admin only.",
)
async def create_skill(
    request: SkillCreateRequest,
    skill_service: SkillSvc,
    current_user: AdminUser,
) -> SkillView:
    return await skill_service.add_skill(request.name.strip(), request.domain_id)


@router.put(
    "/skills/{skill_id}/domain",
    response_model=SkillView,
    summary="Classify skill",
    description="Move a skill into a domain, or make it unclassified with null.",
)
async def classify_skill(
    skill_id: int,
    request: SkillDomainRequest,
    skill_service: SkillSvc,
    current_user: AdminUser,
) -> SkillView:
    return await skill_service.classify_skill(skill_id, request.domain_id)


@router.delete(
    "/skills/{skill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete skill",
    description="Delete a skill and every assessment of it.",
)
async def delete_skill(
    skill_id: int,
    skill_service: SkillSvc,
    current_user: AdminUser,
) -> Response:
    await skill_service.delete_skill(skill_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/skills/{skill_id}/users",
    response_model=List[SkillHolder],
    summary="Users by skill",
    description="Users assessed on a skill, strongest level first.",
)
async def find_users_by_skill(
    skill_id: int,
    skill_service: SkillSvc,
    current_user: CurrentUserDep,
) -> List[SkillHolder]:
    return await skill_service.find_users_by_skill(skill_id)
