"""
Authentication endpoints.

Sign-up, JWT token issuance and the current caller's identity.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from skillz.api.dependencies import CurrentUserDep, UserRepo, UserSvc
from skillz.core.logging_config import get_logger
from skillz.core.security import CurrentUser, Token, create_user_token, verify_password
from skillz.schemas.user import SignupRequest


logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=Token,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Create an account and return an access token for it.",
)
async def signup(request: SignupRequest, user_service: UserSvc) -> Token:
    """
    Register a new user.

    Raises:
        ConflictError (409): If the email is already registered
    """
    user = await user_service.sign_up(request.name, request.email, request.password)
    return create_user_token(user.id)


@router.post("/token", response_model=Token, status_code=status.HTTP_200_OK)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    user_repo: UserRepo,
) -> Token:
    """
    OAuth2 compatible token login endpoint.

    The ``username`` form field carries the user's email.

    Example:
        POST /api/v1/auth/token
        Content-Type: application/x-www-form-urlencoded

        username=jsmadja@xebia.fr&password=...

    Raises:
        HTTPException 401: If credentials are invalid
    """
    user = await user_repo.find_user_by_email(form_data.username)

    if user is None or not verify_password(form_data.password, user["password"]):
        # Same message whether or not the email exists
        logger.info("Login failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Login succeeded", extra={"user_id": user["id"]})
    return create_user_token(user["id"])


@router.get("/me", response_model=CurrentUser)
async def read_users_me(current_user: CurrentUserDep) -> CurrentUser:
    """
    Get current authenticated user information.

    Response:
        {"id": 1, "name": "Julien Smadja", "email": "jsmadja@xebia.fr", "roles": ["Admin"]}
    """
    return current_user
