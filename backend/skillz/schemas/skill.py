"""
Pydantic schemas for skills and user skills.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from skillz.models.skill import UserSkill


class SkillView(BaseModel):
    """A catalogue entry; domain fields are null when unclassified."""
    id: int
    name: str
    domain_id: Optional[int] = None
    domain: Optional[str] = None
    color: Optional[str] = None


class UserSkillView(BaseModel):
    """
    A user's assessment on one skill.

    ``id`` is the user skill id; ``skill_id`` points into the catalogue.
    """
    id: int
    skill_id: int
    name: str
    level: int
    interested: bool
    date: str


class DomainSkills(BaseModel):
    """A user's skills in one domain; score sums the levels."""
    id: Optional[int] = None
    name: Optional[str] = None
    color: Optional[str] = None
    score: int = 0
    skills: List[UserSkillView] = Field(default_factory=list)


def _non_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("name cannot be blank")
    return v.strip()


class SkillCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    domain_id: Optional[int] = None

    validate_name = field_validator("name")(_non_blank)


class SkillDomainRequest(BaseModel):
    """Move a skill into a domain, or out of every domain with null."""
    domain_id: Optional[int] = None


class UserSkillRequest(BaseModel):
    """
    Add (or re-assess) a skill by name.

    Unknown names create an unclassified skill.
    """
    name: str = Field(..., min_length=1, max_length=255)
    level: int = Field(..., ge=UserSkill.MIN_LEVEL, le=UserSkill.MAX_LEVEL)
    interested: bool = False

    validate_name = field_validator("name")(_non_blank)


class UserSkillUpdateRequest(BaseModel):
    level: int = Field(..., ge=UserSkill.MIN_LEVEL, le=UserSkill.MAX_LEVEL)
    interested: bool = False
