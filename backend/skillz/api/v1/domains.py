"""
Domain endpoints.

Reading is open to any authenticated user; changes need the Admin role.
"""

from typing import Any, List

from fastapi import APIRouter, Query, Response, status

from skillz.api.dependencies import AdminUser, CurrentUserDep, DomainSvc
from skillz.schemas.domain import (
    DomainCreateRequest,
    DomainUpdateRequest,
    DomainView,
)


router = APIRouter(tags=["domains"])


@router.get(
    "/domains",
    response_model=None,
    summary="List domains",
    description="Domains ordered by name; `with_skills=true` lists their skills too.",
)
async def list_domains(
    domain_service: DomainSvc,
    current_user: CurrentUserDep,
    with_skills: bool = Query(default=False),
) -> List[Any]:
    if with_skills:
        return await domain_service.get_domains_with_skills()
    return await domain_service.get_domains()


@router.post(
    "/domains",
    response_model=DomainView,
    status_code=status.HTTP_201_CREATED,
    summary="Create domain",
)
async def create_domain(
    request: DomainCreateRequest,
    domain_service: DomainSvc,
    current_user: AdminUser,
) -> DomainView:
    """
    Create a domain.

    Raises:
        ConflictError (409): If the name is taken
    """
    return await domain_service.add_domain(request.name, request.color)


@router.put("/domains/{domain_id}", response_model=DomainView, summary="Update domain")
async def update_domain(
    domain_id: int,
    request: DomainUpdateRequest,
    domain_service: DomainSvc,
    current_user: AdminUser,
) -> DomainView:
    return await domain_service.update_domain(domain_id, request.model_dump(exclude_unset=True))


@router.delete(
    "/domains/{domain_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete domain",
    description="Delete a domain; its skills become unclassified.",
)
async def delete_domain(
    domain_id: int,
    domain_service: DomainSvc,
    current_user: AdminUser,
) -> Response:
    await domain_service.delete_domain(domain_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
