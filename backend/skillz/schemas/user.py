"""
Pydantic schemas for users.

View models keep the field names the web UI already consumes
(``readable_id``, ``experienceCounter``, ``gravatarUrl``); the Python
attributes are snake_case and serialize by alias.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skillz.schemas.skill import DomainSkills


class UserView(BaseModel):
    """
    User as shown in listings.

    Attributes:
        id: User id
        name: Display name
        readable_id: URL-friendly name ("michaël-ohayon")
        manager_id: Manager's user id, if any
        phone: Phone number, if any
        address: Decoded address object, if any
        experience_counter: Years since diploma
        gravatar_url: Protocol-relative gravatar URL
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    readable_id: str
    manager_id: Optional[int] = None
    phone: Optional[str] = None
    address: Optional[Dict[str, Any]] = None
    experience_counter: int = Field(0, alias="experienceCounter")
    gravatar_url: str = Field(..., alias="gravatarUrl")


class UserDetails(UserView):
    """
    User with their skills grouped by domain and their roles
    (the "mobile" listing).
    """
    domains: List[DomainSkills] = Field(default_factory=list)
    roles: List[str] = Field(default_factory=list)
    score: int = 0


class UserProfile(UserDetails):
    """
    Single user page: details plus the manager, when there is one.
    """
    manager: Optional[UserView] = None


class DomainScore(BaseModel):
    """Summed skill levels of a user in one domain."""
    id: int
    name: str
    color: Optional[str] = None
    score: int = 0


class UserWebView(BaseModel):
    """
    User in the web listing: identity plus per-domain scores.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    readable_id: str
    experience_counter: int = Field(0, alias="experienceCounter")
    gravatar_url: str = Field(..., alias="gravatarUrl")
    domains: List[DomainScore] = Field(default_factory=list)
    score: int = 0


class SkillHolder(BaseModel):
    """A user assessed on a given skill."""
    user: UserView
    level: int
    interested: bool


class UserRef(BaseModel):
    id: int
    name: str


class ManagerRef(BaseModel):
    """Manager of a group; both fields are null for users without one."""
    id: Optional[int] = None
    name: Optional[str] = None


class ManagementGroup(BaseModel):
    """Users reporting to one manager."""
    manager: ManagerRef
    users: List[UserRef] = Field(default_factory=list)


class UpdatedSkill(BaseModel):
    id: int
    name: str
    level: int
    interested: bool
    domain: Optional[str] = None
    color: Optional[str] = None


class SkillUpdate(BaseModel):
    """One user skill change in the updates feed."""
    id: int
    date: str
    skill: UpdatedSkill


class UserUpdates(BaseModel):
    """Recent skill changes of one user."""
    user: UserView
    updates: List[SkillUpdate] = Field(default_factory=list)


# Requests

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)


class UserUpdateRequest(BaseModel):
    """
    Partial update of a user's identity fields.

    Only the fields present in the request body are changed.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    diploma: Optional[str] = Field(default=None, pattern=r"^\d{4}$")

    @field_validator("name", "email")
    @classmethod
    def validate_required(cls, v: Optional[str]) -> str:
        # Omitted fields are left alone; an explicit null or blank is not.
        if v is None or not v.strip():
            raise ValueError("cannot be null or blank")
        return v.strip()


class PasswordChangeRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class PhoneUpdateRequest(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=32)


class AddressUpdateRequest(BaseModel):
    """
    Address as an object, e.g. a geocoding result with
    ``formatted_address`` and ``geometry``.
    """
    address: Optional[Dict[str, Any]] = None


class ManagerAssignRequest(BaseModel):
    manager_id: Optional[int] = None

    @field_validator("manager_id")
    @classmethod
    def validate_manager_id(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("manager_id must be a positive integer")
        return v
